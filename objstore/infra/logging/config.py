"""Logging configuration setup.

Builds a dictConfig with all handlers on the root logger so every
``objstore.*`` logger propagates to them:
- Human-readable text or JSONL on stderr
- Optional size-rotated JSONL file
- botocore/aiobotocore/urllib3 capped at their own level
"""

from __future__ import annotations

import logging
import logging.config
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from objstore.core.settings.logs import LoggingSettings

logger = logging.getLogger(__name__)
_LOGGING_INITIALIZED = False

# SDK loggers that flood DEBUG output with wire details
_SDK_LOGGERS = ("botocore", "aiobotocore", "aioboto3", "boto3", "urllib3")

_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def setup_logging(
    log_settings: LoggingSettings | None = None,
    *,
    force: bool = False,
    **configure_kwargs: Any,
) -> None:
    """Ensure logging is configured once across entrypoints.

    Args:
        log_settings: Optional logging settings instance. If omitted, settings
            are loaded via get_logging_settings().
        force: Reconfigure logging even if it was already initialized.
        **configure_kwargs: Explicit overrides for configure_logging().
    """
    global _LOGGING_INITIALIZED

    if _LOGGING_INITIALIZED and not force:
        return

    settings_obj = log_settings
    if settings_obj is None:
        from objstore.core.settings import get_logging_settings

        settings_obj = get_logging_settings()

    log_config = settings_obj.to_logging_kwargs()
    if configure_kwargs:
        log_config = {**log_config, **configure_kwargs}

    configure_logging(**log_config)
    _LOGGING_INITIALIZED = True


def configure_logging(
    log_level: str = "INFO",
    json_logs: bool = False,
    console_enabled: bool = True,
    file_path: str | Path | None = None,
    file_max_bytes: int = 10 * 1024 * 1024,
    file_backup_count: int = 5,
    service_name: str = "objstore",
    botocore_level: str = "WARNING",
    capture_warnings: bool = True,
    **kwargs: Any,
) -> None:
    """Configure logging with dictConfig.

    Args:
        log_level: Root logger level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_logs: Use JSONL on the console. The file handler always writes JSONL.
        console_enabled: Enable console/stderr logging.
        file_path: Path to log file. None disables file logging.
        file_max_bytes: Maximum log file size before rotation.
        file_backup_count: Number of rotated log files to keep.
        service_name: Static ``service`` field in JSON records.
        botocore_level: Level for the AWS SDK and urllib3 loggers.
        capture_warnings: Forward Python warnings to logging system.
        **kwargs: Ignored, logged at debug level.

    Example:
        from objstore.core.settings import get_logging_settings

        configure_logging(**get_logging_settings().to_logging_kwargs())
    """
    path = Path(file_path) if file_path else None
    if path:
        path.parent.mkdir(parents=True, exist_ok=True)

    handlers = _build_handlers_config(
        console_enabled=console_enabled,
        json_logs=json_logs,
        file_path=path,
        file_max_bytes=file_max_bytes,
        file_backup_count=file_backup_count,
    )

    logging_config: dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": _build_formatters_config(service_name),
        "handlers": handlers,
        "loggers": {
            name: {"level": botocore_level.upper(), "propagate": True}
            for name in _SDK_LOGGERS
        },
        "root": {
            "level": log_level.upper(),
            "handlers": list(handlers),
        },
    }

    logging.config.dictConfig(logging_config)
    logging.captureWarnings(capture_warnings)

    if kwargs:
        logger.debug("Unused logging kwargs supplied: %s", ", ".join(sorted(kwargs)))


def _build_formatters_config(service_name: str) -> dict[str, Any]:
    return {
        "text": {"format": _TEXT_FORMAT},
        "json": {
            "()": "objstore.infra.logging.formatters.JSONFormatter",
            "static": {"service": service_name},
        },
    }


def _build_handlers_config(
    console_enabled: bool,
    json_logs: bool,
    file_path: Path | None,
    file_max_bytes: int,
    file_backup_count: int,
) -> dict[str, Any]:
    """Build handlers configuration for dictConfig."""
    handlers: dict[str, Any] = {}

    if console_enabled:
        handlers["console"] = {
            "class": "logging.StreamHandler",
            "formatter": "json" if json_logs else "text",
            "stream": "ext://sys.stderr",
        }

    if file_path:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "json",
            "filename": str(file_path),
            "maxBytes": file_max_bytes,
            "backupCount": file_backup_count,
            "encoding": "utf-8",
        }

    return handlers
