from fastapi import Request
import logging
import uuid
from typing import Any
from rich.logging import RichHandler
from tubefetch.config.settings import LoggingConfig

logger = logging.getLogger("tubefetch")

PLAIN_FORMAT = "%(asctime)s %(levelname)s [%(request_id)s] %(name)s: %(message)s"
RICH_FORMAT = "[%(request_id)s] %(message)s"


class RequestIdFilter(logging.Filter):
    """Guarantee every record carries a request_id attribute"""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = "-"
        return True


def setup_logging(logging_config: LoggingConfig) -> None:
    """Configure the package logger once (rich console or plain stream)"""
    if logging_config.enable_rich:
        handler: logging.Handler = RichHandler(rich_tracebacks=True, show_path=False)
        fmt = RICH_FORMAT if logging_config.format == "%(message)s" else logging_config.format
    else:
        handler = logging.StreamHandler()
        fmt = PLAIN_FORMAT if logging_config.format == "%(message)s" else logging_config.format

    handler.setFormatter(logging.Formatter(fmt))
    handler.addFilter(RequestIdFilter())

    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(logging_config.level)
    logger.propagate = False


async def request_id_middleware(request: Request, call_next):
    """Tag each request with an id used in log lines and echoed back"""
    request_id = request.headers.get("x-request-id") or uuid.uuid4().hex[:12]
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


def log_with_context(
    request: Request,
    level: int,
    message: str,
    **kwargs: Any
) -> None:
    """
    Log with request context.
    Automatically includes request_id for tracing.
    """
    extra = {
        "request_id": getattr(request.state, "request_id", "unknown"),
        **kwargs
    }
    logger.log(level, message, extra=extra)

def log_info(request: Request, message: str, **kwargs: Any) -> None:
    log_with_context(request, logging.INFO, message, **kwargs)

def log_error(request: Request, message: str, **kwargs: Any) -> None:
    log_with_context(request, logging.ERROR, message, **kwargs)

def log_warning(request: Request, message: str, **kwargs: Any) -> None:
    log_with_context(request, logging.WARNING, message, **kwargs)

def log_debug(request: Request, message: str, **kwargs: Any) -> None:
    log_with_context(request, logging.DEBUG, message, **kwargs)
