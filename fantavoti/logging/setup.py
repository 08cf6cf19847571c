import sys
import logging
from pathlib import Path
from typing import Any, Optional, Union

from loguru import logger

SENSITIVE_KEYS = ("key", "token", "password", "secret", "cookie")

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"


def mask(value: Any) -> str:
    """Keeps only the edges of a secret value."""
    text = str(value)
    if len(text) > 8:
        return text[:4] + "****" + text[-4:]
    return "********"


def sensitive_data_filter(record: dict[str, Any]) -> bool:
    """Filter function to mask sensitive values bound as extra fields.

    The bound value is masked in ``extra`` and wherever it appears in the message,
    e.g. ``log.bind(cookie=token).debug(f"Sending cookie {token}")``.
    """
    extra = record.get("extra")
    if isinstance(extra, dict):
        for extra_key, value in extra.items():
            if value is None or not any(sk in extra_key.lower() for sk in SENSITIVE_KEYS):
                continue
            secret = str(value)
            if secret and secret in record["message"]:
                record["message"] = record["message"].replace(secret, mask(secret))
            extra[extra_key] = mask(secret)
    return True  # Keep the record after filtering/masking


class InterceptHandler(logging.Handler):
    """Routes standard logging records (httpx, httpcore) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        # Get corresponding Loguru level if it exists
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where originated the logged message
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(level: str = "INFO", log_file: Optional[Union[str, Path]] = None):
    """Configures the loguru sinks once and returns the logger to hand to components."""
    logger.remove()  # Remove default handler

    logger.add(
        sys.stderr,
        level=level.upper(),
        format=CONSOLE_FORMAT,
        colorize=True,
        backtrace=True,
        diagnose=False,  # Variable values may contain the cookie
        filter=sensitive_data_filter,
    )
    if log_file:
        logger.add(
            str(log_file),
            level=level.upper(),
            format=FILE_FORMAT,
            colorize=False,
            encoding="utf-8",
            filter=sensitive_data_filter,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

    log = logger.bind(app="fantavoti")
    log.debug(f"Logging initialized with level: {level.upper()}")
    if log_file:
        log.debug(f"Logs will be saved to file {log_file}")
    return log
