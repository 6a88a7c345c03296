# util/logger.py
import copy
import logging
import os
import re
import sys
from logging.handlers import RotatingFileHandler
from config.settings import settings

logging.captureWarnings(True)

_BEARER_RE = re.compile(r"(Bearer\s+)\S+", re.IGNORECASE)
_TRACEBACKS = logging.Formatter()


class RedactSecretsFilter(logging.Filter):
    """Masks bearer tokens in the formatted message and in traceback text."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        if "earer" in message:
            record.msg = _BEARER_RE.sub(r"\1***", message)
            record.args = None
        if record.exc_info and not record.exc_text:
            # Formatters reuse exc_text when it is already set.
            record.exc_text = _TRACEBACKS.formatException(record.exc_info)
        if record.exc_text and "earer" in record.exc_text:
            record.exc_text = _BEARER_RE.sub(r"\1***", record.exc_text)
        return True


class ColoredFormatter(logging.Formatter):
    COLORS = {
        "DEBUG": "\033[37m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[41m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        # Color a copy so the file handler still sees the plain levelname.
        tinted = copy.copy(record)
        lvl = record.levelname
        tinted.levelname = f"{self.COLORS.get(lvl, self.RESET)}{lvl}{self.RESET}"
        return super().format(tinted)


def _file_handler(level: int, fmt: logging.Formatter) -> logging.Handler:
    os.makedirs(settings.LOG_DIR, exist_ok=True)
    fh = RotatingFileHandler(
        os.path.join(settings.LOG_DIR, settings.LOG_FILE_NAME),
        maxBytes=settings.LOG_MAX_BYTES,
        backupCount=settings.LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    fh.setLevel(level)
    fh.setFormatter(fmt)
    return fh


def init_logger() -> logging.Logger:
    """
    Idempotent logger init:
    - Console on stdout, colored when attached to a TTY.
    - Rotating file under settings.LOG_DIR when settings.LOG_TO_FILE is True.
    - Bearer tokens are masked on every handler.
    """
    root = logging.getLogger()
    if getattr(root, "_authservice_inited", False):
        return logging.getLogger(settings.LOGGER_NAME)

    level = getattr(logging, (settings.LOG_LEVEL or "INFO").upper(), logging.INFO)
    root.setLevel(level)
    for h in list(root.handlers):
        root.removeHandler(h)

    text_fmt = "%(asctime)s %(levelname)s %(name)s - %(message)s"
    date_fmt = "%Y-%m-%dT%H:%M:%S%z"
    plain = logging.Formatter(text_fmt, datefmt=date_fmt)

    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(level)
    ch.setFormatter(
        ColoredFormatter(text_fmt, datefmt=date_fmt) if sys.stdout.isatty() else plain
    )
    handlers: list[logging.Handler] = [ch]
    if settings.LOG_TO_FILE:
        handlers.append(_file_handler(level, plain))

    redact = RedactSecretsFilter()
    for h in handlers:
        h.addFilter(redact)
        root.addHandler(h)

    # httpx logs every request line at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("redis").setLevel(logging.WARNING)

    root._authservice_inited = True  # type: ignore[attr-defined]
    logger = logging.getLogger(settings.LOGGER_NAME)
    logger.debug("logger.init level=%s file=%s", logging.getLevelName(level), settings.LOG_TO_FILE)
    return logger
