from __future__ import annotations

import logging
import logging.config
from pathlib import Path
from typing import Dict

LOG_FILE_NAME = "autoresponder.log"
FILE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
CONSOLE_FORMAT = "%(levelname)s | %(message)s"
# Google client internals log every discovery-cache miss and OAuth redirect.
NOISY_LOGGERS = ("googleapiclient.discovery_cache", "google_auth_oauthlib.flow")


def _handlers(log_path: Path) -> Dict[str, Dict]:
    return {
        "file": {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "file",
            "filename": str(log_path),
            "maxBytes": 1_000_000,
            "backupCount": 3,
            "encoding": "utf-8",
        },
        "stdout": {
            "class": "logging.StreamHandler",
            "formatter": "console",
        },
    }


def configure_logging(log_dir: Path, level: str = "INFO") -> Path:
    """Log replies, tagging and pass results to the console and ``log_dir``.

    Returns the path of the rotating log file.
    """

    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / LOG_FILE_NAME

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "file": {"format": FILE_FORMAT},
                "console": {"format": CONSOLE_FORMAT},
            },
            "handlers": _handlers(log_path),
            "loggers": {name: {"level": "WARNING"} for name in NOISY_LOGGERS},
            "root": {"handlers": ["file", "stdout"], "level": level.upper()},
        }
    )
    logging.getLogger(__name__).debug("Logging to %s at %s", log_path, level)
    return log_path
