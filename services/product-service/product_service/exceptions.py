"""
Custom exceptions for the product and import services.
Provides structured error handling with rich context for debugging and monitoring.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


class ErrorSeverity(Enum):
    """Severity levels for errors."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Categories of errors for routing and handling."""
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    PARSING = "parsing"
    AWS_SERVICE = "aws_service"
    CONFIGURATION = "configuration"


@dataclass
class ErrorContext:
    """Rich context for error tracking and debugging."""
    correlation_id: Optional[str] = None
    product_id: Optional[str] = None
    field_name: Optional[str] = None
    table_name: Optional[str] = None
    s3_bucket: Optional[str] = None
    s3_key: Optional[str] = None
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    additional_data: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert context to dictionary for logging."""
        return {
            "correlation_id": self.correlation_id,
            "product_id": self.product_id,
            "field_name": self.field_name,
            "table_name": self.table_name,
            "s3_bucket": self.s3_bucket,
            "s3_key": self.s3_key,
            "timestamp": self.timestamp,
            **self.additional_data,
        }


class ProductServiceError(Exception):
    """Base exception for all product and import service errors."""

    status_code = 500

    def __init__(
        self,
        message: str,
        context: Optional[ErrorContext] = None,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        category: ErrorCategory = ErrorCategory.AWS_SERVICE,
        original_exception: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.context = context or ErrorContext()
        self.severity = severity
        self.category = category
        self.original_exception = original_exception

    def to_dict(self) -> dict:
        """Serialize exception for logging and monitoring."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "severity": self.severity.value,
            "category": self.category.value,
            "status_code": self.status_code,
            "context": self.context.to_dict(),
            "original_exception": (
                str(self.original_exception) if self.original_exception else None
            ),
        }


class ValidationError(ProductServiceError):
    """Raised when client input is missing or malformed."""

    status_code = 400

    def __init__(
        self,
        message: str,
        field_name: Optional[str] = None,
        actual: Any = None,
        context: Optional[ErrorContext] = None,
    ):
        ctx = context or ErrorContext()
        ctx.field_name = field_name

        super().__init__(
            message=message,
            context=ctx,
            severity=ErrorSeverity.LOW,
            category=ErrorCategory.VALIDATION,
        )
        self.field_name = field_name
        self.actual = actual


class NotFoundError(ProductServiceError):
    """Raised when a requested product does not exist."""

    status_code = 404

    def __init__(
        self,
        message: str,
        product_id: str,
        table_name: Optional[str] = None,
        context: Optional[ErrorContext] = None,
    ):
        ctx = context or ErrorContext()
        ctx.product_id = product_id
        ctx.table_name = table_name

        super().__init__(
            message=message,
            context=ctx,
            severity=ErrorSeverity.LOW,
            category=ErrorCategory.NOT_FOUND,
        )
        self.product_id = product_id


class StoreError(ProductServiceError):
    """Raised when a DynamoDB operation fails."""

    def __init__(
        self,
        message: str,
        table_name: str,
        operation: str,
        context: Optional[ErrorContext] = None,
        original_exception: Optional[Exception] = None,
    ):
        ctx = context or ErrorContext()
        ctx.table_name = table_name
        ctx.additional_data["operation"] = operation

        super().__init__(
            message=message,
            context=ctx,
            severity=ErrorSeverity.HIGH,
            category=ErrorCategory.AWS_SERVICE,
            original_exception=original_exception,
        )
        self.table_name = table_name
        self.operation = operation


class ConflictError(StoreError):
    """Raised when a conditional create finds the product or stock already present."""

    def __init__(
        self,
        message: str,
        product_id: str,
        table_name: str,
        context: Optional[ErrorContext] = None,
        original_exception: Optional[Exception] = None,
    ):
        ctx = context or ErrorContext()
        ctx.product_id = product_id

        super().__init__(
            message=message,
            table_name=table_name,
            operation="TransactWriteItems",
            context=ctx,
            original_exception=original_exception,
        )
        self.severity = ErrorSeverity.MEDIUM
        self.category = ErrorCategory.CONFLICT
        self.product_id = product_id


class StorageError(ProductServiceError):
    """Raised when an S3 operation fails."""

    def __init__(
        self,
        message: str,
        bucket: str,
        key: str,
        operation: str = "GetObject",
        context: Optional[ErrorContext] = None,
        original_exception: Optional[Exception] = None,
    ):
        ctx = context or ErrorContext()
        ctx.s3_bucket = bucket
        ctx.s3_key = key
        ctx.additional_data["operation"] = operation

        super().__init__(
            message=message,
            context=ctx,
            severity=ErrorSeverity.HIGH,
            category=ErrorCategory.AWS_SERVICE,
            original_exception=original_exception,
        )
        self.bucket = bucket
        self.key = key
        self.operation = operation


class RelocationError(StorageError):
    """Raised when moving an object between lifecycle prefixes fails."""

    def __init__(
        self,
        message: str,
        bucket: str,
        key: str,
        destination_key: str,
        operation: str,
        original_exception: Optional[Exception] = None,
    ):
        ctx = ErrorContext()
        ctx.additional_data["destination_key"] = destination_key

        super().__init__(
            message=message,
            bucket=bucket,
            key=key,
            operation=operation,
            context=ctx,
            original_exception=original_exception,
        )
        self.destination_key = destination_key


class ParseError(ProductServiceError):
    """Raised when an uploaded CSV file cannot be parsed at all."""

    def __init__(
        self,
        message: str,
        s3_key: Optional[str] = None,
        context: Optional[ErrorContext] = None,
    ):
        ctx = context or ErrorContext()
        ctx.s3_key = s3_key

        super().__init__(
            message=message,
            context=ctx,
            severity=ErrorSeverity.MEDIUM,
            category=ErrorCategory.PARSING,
        )


class ConfigurationError(ProductServiceError):
    """Raised when configuration is invalid or missing."""

    def __init__(
        self,
        message: str,
        config_key: str,
        context: Optional[ErrorContext] = None,
    ):
        ctx = context or ErrorContext()
        ctx.additional_data["config_key"] = config_key

        super().__init__(
            message=message,
            context=ctx,
            severity=ErrorSeverity.CRITICAL,
            category=ErrorCategory.CONFIGURATION,
        )
        self.config_key = config_key


class ImportBatchError(ProductServiceError):
    """Raised when one or more objects of an import event failed."""

    def __init__(self, failures: dict[str, Exception]):
        keys = ", ".join(sorted(failures))
        ctx = ErrorContext()
        ctx.additional_data["failed_keys"] = sorted(failures)

        super().__init__(
            message=f"Failed to import {len(failures)} file(s): {keys}",
            context=ctx,
            severity=ErrorSeverity.HIGH,
            category=ErrorCategory.PARSING,
            original_exception=next(iter(failures.values()), None),
        )
        self.failures = failures
