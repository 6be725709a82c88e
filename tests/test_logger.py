from __future__ import annotations

import logging

from utils.logger import LOG_FILE_NAME, configure_logging


def test_records_reach_rotating_file_and_noise_is_quieted(tmp_path) -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        log_path = configure_logging(tmp_path / "logs", "debug")

        logging.getLogger("services.auto_responder").info("Replied to thread with ID: %s", "t1")
        logging.getLogger("googleapiclient.discovery_cache").info("file_cache is only supported with oauth2client<4.0.0")
        for handler in root.handlers:
            handler.flush()

        assert log_path == tmp_path / "logs" / LOG_FILE_NAME
        assert root.level == logging.DEBUG
        content = log_path.read_text(encoding="utf-8")
        assert "INFO | services.auto_responder | Replied to thread with ID: t1" in content
        assert "file_cache" not in content
    finally:
        for handler in root.handlers[:]:
            if handler not in saved_handlers:
                root.removeHandler(handler)
                handler.close()
        for handler in saved_handlers:
            if handler not in root.handlers:
                root.addHandler(handler)
        root.setLevel(saved_level)
        logging.getLogger("googleapiclient.discovery_cache").setLevel(logging.NOTSET)
        logging.getLogger("google_auth_oauthlib.flow").setLevel(logging.NOTSET)
