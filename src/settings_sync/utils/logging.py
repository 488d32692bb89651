import logging
import sys
from typing import Any, TextIO

# Emojis per level
EMOJI_MAP = {
    "DEBUG": "🐞",
    "INFO": "💡",
    "WARNING": "⚠️",
    "ERROR": "🔥",
    "CRITICAL": "💀",
}

ROOT_LOGGER = "settings_sync"

# Libraries that log every request at INFO.
NOISY_LOGGERS = ("httpx", "httpcore")

_DEFAULT_RECORD_ATTRS = frozenset(
    logging.LogRecord(
        name="",
        level=logging.NOTSET,
        pathname="",
        lineno=0,
        msg="",
        args=(),
        exc_info=None,
    ).__dict__
) | {"message", "asctime"}


def subsystem_of(logger_name: str) -> str:
    """``settings_sync.providers.client`` -> ``providers.client``; others unchanged."""
    prefix = f"{ROOT_LOGGER}."
    if logger_name.startswith(prefix):
        return logger_name[len(prefix) :]
    return logger_name


def _format_value(value: Any) -> str:
    # Counts and flags read better bare; strings keep their quotes.
    if isinstance(value, (bool, int, float)) or value is None:
        return str(value)
    return repr(value)


class EmojiFormatter(logging.Formatter):
    """Adds a level emoji, the subsystem name and any ``extra=`` fields."""

    def format(self, record: logging.LogRecord) -> str:
        emoji = EMOJI_MAP.get(record.levelname, "")
        log_line = (
            f"{emoji} [{record.levelname:<8}] ({subsystem_of(record.name)}) "
            f"{record.getMessage()}"
        )

        extra_attrs = {
            k: v
            for k, v in record.__dict__.items()
            if k not in _DEFAULT_RECORD_ATTRS and not k.startswith("_")
        }

        if extra_attrs:
            extra_str = " ".join(
                f"{k}={_format_value(v)}" for k, v in extra_attrs.items()
            )
            log_line = f"{log_line} | {extra_str}"

        if record.exc_info:
            log_line = f"{log_line}\n{self.formatException(record.exc_info)}"

        return log_line


def setup_logging(level: int = logging.INFO, stream: TextIO | None = None) -> None:
    """Configure root logger with emoji formatter.

    HTTP client loggers stay at WARNING unless ``level`` is DEBUG, so a model
    refresh every few minutes does not flood the output.
    """
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(EmojiFormatter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(
            logging.DEBUG if level <= logging.DEBUG else logging.WARNING
        )


# Helper for subsystems
def get_logger(name: str) -> logging.Logger:
    """Get a subsystem logger."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
