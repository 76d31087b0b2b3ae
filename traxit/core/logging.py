from fastapi import Request
import logging
from typing import Any

from rich.logging import RichHandler

from traxit.config.settings import LoggingConfig

logger = logging.getLogger("traxit.api")

def setup_logging(logging_config: LoggingConfig) -> None:
    """Configure the root logger once at startup"""
    if logging_config.enable_rich:
        handler = RichHandler(rich_tracebacks=True, show_path=False)
        handler.setFormatter(logging.Formatter(logging_config.format, datefmt="[%X]"))
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging_config.level)

    # access logs duplicate the per-request lines
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

def log_with_context(
    request: Request,
    level: int,
    message: str,
    **kwargs: Any
) -> None:
    """Log with the request id prefixed; kwargs land on the record as extra fields"""
    request_id = getattr(request.state, "request_id", "-")
    extra = {"request_id": request_id, "path": request.url.path, **kwargs}
    logger.log(level, f"[{request_id}] {message}", extra=extra)

def log_info(request: Request, message: str, **kwargs: Any) -> None:
    log_with_context(request, logging.INFO, message, **kwargs)

def log_error(request: Request, message: str, **kwargs: Any) -> None:
    log_with_context(request, logging.ERROR, message, **kwargs)

def log_warning(request: Request, message: str, **kwargs: Any) -> None:
    log_with_context(request, logging.WARNING, message, **kwargs)

def log_debug(request: Request, message: str, **kwargs: Any) -> None:
    log_with_context(request, logging.DEBUG, message, **kwargs)
