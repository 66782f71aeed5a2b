import pytest

from rvplanner.config.settings import get_logging_config, get_settings


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_defaults_load_from_packaged_yaml(monkeypatch):
    monkeypatch.delenv("RVPLANNER_CONFIG_PATH", raising=False)
    monkeypatch.delenv("RVPLANNER_STORAGE_BACKEND", raising=False)
    # No overrides: values come straight from the packaged defaults.yaml.
    settings = get_settings()
    assert settings.storage.backend == "local"
    assert settings.catalog.path == "data/catalogs/parks.json"
    assert settings.map.colors.success == "#10b981"
    assert settings.export.version == "1.0"


def test_env_overrides_are_applied(monkeypatch, tmp_path):
    monkeypatch.setenv("RVPLANNER_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("RVPLANNER_STORAGE_BACKEND", "mirrored")
    monkeypatch.setenv("RVPLANNER_REMOTE_URL", "https://example.test")
    monkeypatch.setenv("RVPLANNER_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("RVPLANNER_TIMEZONE", "America/Chicago")
    # Each variable lands on its nested settings field.
    settings = get_settings()
    assert settings.storage.dir == str(tmp_path)
    assert settings.storage.backend == "mirrored"
    assert settings.storage.remote.base_url == "https://example.test"
    assert settings.app.log_level == "DEBUG"
    assert settings.app.timezone == "America/Chicago"


def test_external_config_file(monkeypatch, tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("map:\n  zoom: 6\n", encoding="utf-8")
    monkeypatch.setenv("RVPLANNER_CONFIG_PATH", str(path))
    # The external file replaces the packaged YAML; unset sections keep their model defaults.
    settings = get_settings()
    assert settings.map.zoom == 6
    assert settings.storage.backend in {"local", "mirrored"}


def test_logging_config_has_console_handler():
    config = get_logging_config()
    assert config["version"] == 1
    assert "console" in config["handlers"]
