from __future__ import annotations

import logging
import os
import tempfile
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOGGER_NAME = "SpatialNav"
PROPAGATE_ENV_VAR = "SPATIAL_NAV_PROPAGATE_LOGS"
LOG_DIR_ENV_VAR = "SPATIAL_NAV_LOG_DIR"


def configure_package_logger(debug_enabled: bool = False) -> logging.Logger:
    """Set up the ``SpatialNav`` logger tree.

    Records stay inside the tree unless ``SPATIAL_NAV_PROPAGATE_LOGS`` is
    truthy, so a host application's root handlers are not flooded with
    per-keypress debug output.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(resolve_log_level(debug_enabled))
    logger.propagate = os.environ.get(PROPAGATE_ENV_VAR, "").lower() in {"1", "true", "yes", "on"}
    return logger


def resolve_logs_dir(base_path: Path, log_dir_name: str = "SpatialNav") -> Path:
    """
    Resolve the directory to store navigation logs.

    Strategy:
    - Use SPATIAL_NAV_LOG_DIR if set.
    - Fall back to XDG state/cache locations, then `cwd/logs/<log_dir_name>`.
    - Final fallback: tempdir/<log_dir_name>.
    ``base_path`` is the application directory; it is only used when it already
    contains a ``logs`` folder.
    """
    candidates = []

    env_override = os.environ.get(LOG_DIR_ENV_VAR)
    if env_override:
        candidates.append(Path(env_override).expanduser())

    app_logs = base_path.resolve() / "logs"
    if app_logs.is_dir():
        candidates.append(app_logs)

    state_home = Path(os.environ.get("XDG_STATE_HOME", Path.home() / ".local" / "state"))
    cache_home = Path(os.environ.get("XDG_CACHE_HOME", Path.home() / ".cache"))
    candidates.append(state_home / "spatial-nav" / "logs")
    candidates.append(cache_home / "spatial-nav" / "logs")
    candidates.append(Path.cwd() / "logs")

    for base in candidates:
        try:
            target = base / log_dir_name
            target.mkdir(parents=True, exist_ok=True)
            return target
        except OSError:
            continue

    temp_fallback = Path(tempfile.gettempdir()) / log_dir_name
    temp_fallback.mkdir(parents=True, exist_ok=True)
    return temp_fallback


def build_rotating_file_handler(
    log_dir: Path,
    filename: str,
    *,
    retention: int = 5,
    max_bytes: int = 512 * 1024,
    formatter: Optional[logging.Formatter] = None,
) -> logging.Handler:
    """Construct a rotating file handler with sane defaults."""
    retention = max(1, retention)
    backup_count = max(0, retention - 1)
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_dir / filename,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    if formatter is not None:
        handler.setFormatter(formatter)
    return handler


def resolve_log_level(debug_enabled: bool) -> int:
    return logging.DEBUG if debug_enabled else logging.INFO
