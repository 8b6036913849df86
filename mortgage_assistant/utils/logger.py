import logging
import os

from pythonjsonlogger import jsonlogger


class Logger(logging.LoggerAdapter):
    """Process-wide JSON logger; keyword arguments become structured fields.

    ``logger.info("Session started", session_id=sid)`` emits one JSON line with
    ``session_id`` next to the message, the level and the source location.
    """

    _instance = None
    _initialized = False

    def __new__(cls) -> "Logger":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if Logger._initialized:
            return

        level_name = os.getenv("LOG_LEVEL", "INFO").upper()
        # Unknown level names fall back to INFO
        log_level = logging.getLevelNamesMapping().get(level_name, logging.INFO)

        formatter = jsonlogger.JsonFormatter(
            "%(asctime)s %(levelname)s %(message)s %(filename)s %(lineno)d",
            rename_fields={"asctime": "@timestamp", "levelname": "log_level", "filename": "file"},
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler = logging.StreamHandler()
        handler.setFormatter(formatter)

        base_logger = logging.getLogger("mortgage_assistant")
        base_logger.setLevel(log_level)
        base_logger.addHandler(handler)
        base_logger.propagate = False

        super().__init__(base_logger)
        Logger._initialized = True

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        passthrough = {
            key: kwargs.pop(key)
            for key in ("exc_info", "stack_info", "stacklevel")
            if key in kwargs
        }
        if kwargs:
            passthrough["extra"] = kwargs
        return msg, passthrough


def crop_text(text: str | None, max_length: int = 50) -> str:
    """Shorten user-supplied text before it goes into a log line."""
    if not text:
        return ""
    return f"{text[:max_length]}..." if len(text) > max_length else text


logger = Logger()
logger.debug(f"Logging level set to {logging.getLevelName(logger.logger.level)}")
