"""
Logging configuration.

We use a YAML logging config (`src/rvplanner/config/logging.yaml`) and then apply
runtime overrides from settings (e.g., `RVPLANNER_LOG_LEVEL`).
"""

from __future__ import annotations

import logging.config

from rvplanner.config.settings import get_logging_config, get_settings


def configure_logging(level: str | None = None) -> None:
    """Configure the Python logging system based on packaged YAML config + settings.

    `level` wins over the configured level (used by the CLI `--verbose` flag).
    """
    settings = get_settings()
    config = dict(get_logging_config())

    effective = (level or settings.app.log_level).upper()
    config.setdefault("root", {})["level"] = effective
    for handler in config.get("handlers", {}).values():
        if isinstance(handler, dict) and "level" in handler:
            handler["level"] = effective

    logging.config.dictConfig(config)
