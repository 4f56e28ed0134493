"""Runtime configuration — env-driven settings and route file loading.

Settings are read from ``LOGFAN_*`` environment variables or a ``.env``
file.  The level configuration itself lives in a separate routes file
(JSON, TOML, or ``[tool.logfan.levels]`` in ``pyproject.toml``).
"""

from __future__ import annotations

import json
import tomllib
from pathlib import Path
from typing import Any

from pydantic_settings import BaseSettings, SettingsConfigDict

from logfan.models.routing import InvalidConfigurationError


class LogfanSettings(BaseSettings):
    """Process settings with environment variable overrides.

    Examples
    --------
    Override via environment::

        export LOGFAN_LOG_LEVEL=DEBUG
        export LOGFAN_ROUTES_PATH=/etc/logfan/routes.toml
        export LOGFAN_MONGO_URI=mongodb://localhost:27017
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="LOGFAN_",
        env_file_encoding="utf-8",
    )

    log_level: str = "INFO"
    routes_path: Path = Path("logfan.toml")

    # MongoDB sinks
    mongo_uri: str | None = None
    mongo_database: str = "logs"

    # fluentd sinks
    fluentd_service_id: str = "logfan"
    fluentd_timeout: float = 3.0


def _levels_from(document: dict[str, Any], path: Path) -> dict[str, Any]:
    if path.name == "pyproject.toml":
        document = document.get("tool", {}).get("logfan", {})
    levels = document.get("levels", document)
    if not isinstance(levels, dict):
        raise InvalidConfigurationError(
            f"Routes file {path} must contain a table of levels", value=levels
        )
    return levels


def load_routes(path: Path | str) -> dict[str, Any]:
    """Read a level configuration from *path*.

    The mapping may sit at the top level of the file or under a
    ``levels`` key.

    Raises
    ------
    InvalidConfigurationError
        If the file is missing, unparsable, or not a level mapping.
    """
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise InvalidConfigurationError(f"Cannot read routes file {path}: {exc}") from exc

    try:
        if path.suffix == ".json":
            document = json.loads(raw)
        else:
            document = tomllib.loads(raw.decode("utf-8"))
    except (ValueError, UnicodeDecodeError) as exc:
        raise InvalidConfigurationError(f"Cannot parse routes file {path}: {exc}") from exc

    if not isinstance(document, dict):
        raise InvalidConfigurationError(
            f"Routes file {path} must contain a table of levels", value=document
        )
    return _levels_from(document, path)


# Module-level singleton — import as `from logfan.config import settings`
settings = LogfanSettings()
