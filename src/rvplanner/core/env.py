"""
Project root and `.env` handling.

The planner keeps its catalog under `data/catalogs/` and, by default, the user's
collection under `.data/rvplanner/`. Both are configured as relative paths, so the
CLI, uvicorn and pytest must agree on what they are relative to, whatever directory
they were started from. A repo-local `.env` usually carries `RVPLANNER_DATA_DIR`,
`RVPLANNER_REMOTE_URL` and friends; it never overrides variables already exported.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

ROOT_ENV = "RVPLANNER_PROJECT_ROOT"
ENV_FILE_ENV = "RVPLANNER_ENV_FILE"


def _is_root(path: Path) -> bool:
    if (path / ".env").is_file() or (path / ".git").exists():
        return True
    if (path / "pyproject.toml").is_file() and (path / "src" / "rvplanner").is_dir():
        return True
    return (path / "data" / "catalogs").is_dir()


def _search_up(start: Path) -> Path | None:
    start = start.resolve()
    return next((p for p in (start, *start.parents) if _is_root(p)), None)


@lru_cache
def get_project_root() -> Path:
    """Return the directory relative paths in settings are resolved against (cached)."""
    if os.getenv(ROOT_ENV):
        return Path(os.environ[ROOT_ENV]).expanduser().resolve()
    if os.getenv(ENV_FILE_ENV):
        return Path(os.environ[ENV_FILE_ENV]).expanduser().resolve().parent
    # The working directory wins; an editable install run from elsewhere still finds its checkout.
    return _search_up(Path.cwd()) or _search_up(Path(__file__).parent) or Path.cwd().resolve()


@lru_cache
def load_dotenv_if_present() -> Path | None:
    """Load the project's `.env` once; returns its path, or None when there is none."""
    if os.getenv(ENV_FILE_ENV):
        env_path = Path(os.environ[ENV_FILE_ENV]).expanduser().resolve()
    else:
        env_path = get_project_root() / ".env"
    if not env_path.is_file():
        return None
    load_dotenv(dotenv_path=env_path, override=False)
    return env_path


def resolve_project_path(path: str | Path) -> Path:
    """Resolve a possibly-relative path against the project root."""
    p = Path(path).expanduser()
    if p.is_absolute():
        return p
    return (get_project_root() / p).resolve()
