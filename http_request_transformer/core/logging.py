# Centralized logging configuration for the http_request_transformer package.

import logging
import sys
from typing import Any, Dict, Optional

from http_request_transformer.settings import Settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Default level if LOG_LEVEL env var is not set
DEFAULT_LOG_LEVEL = "INFO"

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# Transports used underneath the pipeline log every connection at DEBUG
NOISY_LIBRARIES = ["httpx", "httpcore"]

HANDLER_LOGGER_NAME = "http_request_transformer.pipeline.handler"


def setup_logging() -> None:
    """
    Configures logging for applications using the pipeline.

    Reads the desired log level from the LOG_LEVEL environment variable.
    Defaults to INFO if not set or invalid.
    Sets a standard format and directs logs to stderr.
    Sets louder libraries to WARNING level.
    """
    settings = Settings()
    log_level_name = settings.get_log_level(default=DEFAULT_LOG_LEVEL)

    if log_level_name not in VALID_LOG_LEVELS:
        print(
            f"WARNING: Invalid LOG_LEVEL '{log_level_name}'. "
            f"Defaulting to {DEFAULT_LOG_LEVEL}. "
            f"Valid levels are: {', '.join(VALID_LOG_LEVELS)}",
            file=sys.stderr,
        )
        log_level_name = DEFAULT_LOG_LEVEL

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.getLevelName(log_level_name))
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(console_handler)

    for lib_name in NOISY_LIBRARIES:
        logging.getLogger(lib_name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(f"Logging configured with level {log_level_name}.")


def log_handler_execution(
    handler_name: str,
    status: str,
    request: Optional[Any] = None,
    duration: Optional[float] = None,
    error: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> None:
    """Log the outcome of a single handler invocation."""
    logger = logging.getLogger(HANDLER_LOGGER_NAME)
    log_data: Dict[str, Any] = {
        "handler_name": handler_name,
        "status": status,
    }

    target = ""
    if request is not None:
        log_data["method"] = request.method
        log_data["url"] = str(request.url)
        target = f" {request.method} {request.url}"

    if duration is not None:
        log_data["duration_seconds"] = str(duration)

    if error:
        log_data["error"] = error

    if details:
        log_data.update(details)

    if status == "error":
        logger.error(f"Handler {handler_name} failed{target}", extra=log_data)
    else:
        logger.debug(f"Handler {handler_name} {status}{target}", extra=log_data)
