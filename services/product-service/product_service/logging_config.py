"""
Structured logging configuration with correlation ID support.
Provides JSON logging format suitable for CloudWatch and log aggregation.
"""

import functools
import json
import logging
import os
import sys
import time
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Optional

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

_CONTEXT_FIELDS = (
    "product_id",
    "table_name",
    "s3_bucket",
    "s3_key",
    "status_code",
    "duration_ms",
    "metrics",
)


def set_correlation_id(correlation_id: Optional[str] = None) -> str:
    """Set correlation ID for the current context."""
    cid = correlation_id or str(uuid.uuid4())
    correlation_id_var.set(cid)
    return cid


def get_correlation_id() -> str:
    """Get correlation ID for the current context."""
    return correlation_id_var.get()


def set_request_id(request_id: Optional[str]) -> None:
    """Set the Lambda request ID for the current context."""
    request_id_var.set(request_id or "")


def get_request_id() -> str:
    return request_id_var.get()


def bind_invocation(event: Optional[dict], context) -> str:
    """
    Start the logging context of a Lambda invocation.

    API Gateway events carry their own request id, which becomes the
    correlation id; anything else gets a fresh one.
    """
    request_context = (event or {}).get("requestContext") or {}
    set_request_id(getattr(context, "aws_request_id", None))
    return set_correlation_id(request_context.get("requestId"))


class StructuredJsonFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.
    Outputs logs in a format suitable for CloudWatch Logs Insights and log aggregation.
    """

    def __init__(self, service_name: str = "product-service"):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
            "correlation_id": get_correlation_id(),
            "request_id": get_request_id(),
        }

        if record.funcName:
            log_data["function"] = record.funcName
        if record.lineno:
            log_data["line"] = record.lineno

        for name in _CONTEXT_FIELDS:
            if hasattr(record, name):
                log_data[name] = getattr(record, name)

        if hasattr(record, "extra_data") and isinstance(record.extra_data, dict):
            log_data["data"] = record.extra_data

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
            }

        return json.dumps(log_data, default=str)


class ObjectLogger(logging.LoggerAdapter):
    """Logger adapter bound to one S3 object."""

    def process(self, msg, kwargs):
        extra = kwargs.get("extra", {})
        extra.update(self.extra)
        kwargs["extra"] = extra
        return msg, kwargs


def object_logger(logger: logging.Logger, bucket: str, key: str) -> ObjectLogger:
    """Return a logger that tags every record with the object's bucket and key."""
    return ObjectLogger(logger, {"s3_bucket": bucket, "s3_key": key})


def configure_logging(
    level: str = "INFO",
    service_name: str = "product-service",
) -> logging.Logger:
    """
    Configure structured logging for Lambda.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        service_name: Name of the service for log identification

    Returns:
        The configured root logger
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)

    if os.environ.get("AWS_LAMBDA_FUNCTION_NAME"):
        handler.setFormatter(StructuredJsonFormatter(service_name))
    else:
        handler.setFormatter(
            logging.Formatter(
                "[%(levelname)s] %(asctime)s - %(name)s - %(message)s"
            )
        )

    root_logger.addHandler(handler)

    logging.getLogger("boto3").setLevel(logging.WARNING)
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    return root_logger


def log_execution_time(logger: logging.Logger):
    """
    Decorator to log function execution time.

    Example:
        @log_execution_time(logger)
        def handler(event, context):
            ...
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            start_time = time.perf_counter()
            try:
                result = func(*args, **kwargs)
                duration_ms = (time.perf_counter() - start_time) * 1000
                extra = {"duration_ms": round(duration_ms, 2)}
                if isinstance(result, dict) and "statusCode" in result:
                    extra["status_code"] = result["statusCode"]
                logger.info(f"{func.__name__} completed", extra=extra)
                return result
            except Exception as e:
                duration_ms = (time.perf_counter() - start_time) * 1000
                logger.error(
                    f"{func.__name__} failed after {duration_ms:.2f}ms: {e}",
                    extra={"duration_ms": round(duration_ms, 2)},
                    exc_info=True,
                )
                raise
        return wrapper
    return decorator
