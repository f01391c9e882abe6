"""Tests for custom exceptions."""

from product_service.exceptions import (
    ConflictError,
    ErrorCategory,
    ErrorContext,
    ErrorSeverity,
    ImportBatchError,
    NotFoundError,
    ParseError,
    ProductServiceError,
    RelocationError,
    StorageError,
    StoreError,
    ValidationError,
)


class TestErrorContext:
    """Tests for ErrorContext."""

    def test_error_context_defaults(self):
        """Test ErrorContext has sensible defaults."""
        ctx = ErrorContext()
        assert ctx.correlation_id is None
        assert ctx.product_id is None
        assert ctx.timestamp is not None

    def test_error_context_to_dict(self):
        """Test ErrorContext serialization."""
        ctx = ErrorContext(
            correlation_id="test-123",
            product_id="prod-456",
            table_name="products",
            additional_data={"operation": "Scan"},
        )
        result = ctx.to_dict()

        assert result["correlation_id"] == "test-123"
        assert result["product_id"] == "prod-456"
        assert result["table_name"] == "products"
        assert result["operation"] == "Scan"


class TestProductServiceError:
    """Tests for the base class."""

    def test_to_dict(self):
        error = ProductServiceError(
            message="Test error",
            severity=ErrorSeverity.MEDIUM,
            category=ErrorCategory.VALIDATION,
        )
        result = error.to_dict()

        assert str(error) == "Test error"
        assert result["error_type"] == "ProductServiceError"
        assert result["severity"] == "medium"
        assert result["category"] == "validation"
        assert result["status_code"] == 500


class TestClientErrors:
    """Tests for errors that map to 4xx responses."""

    def test_validation_error(self):
        error = ValidationError("Invalid product ID format", field_name="id", actual="x")

        assert error.status_code == 400
        assert error.context.field_name == "id"
        assert error.category == ErrorCategory.VALIDATION

    def test_not_found_error(self):
        error = NotFoundError("missing", product_id="p1", table_name="products")

        assert error.status_code == 404
        assert error.context.product_id == "p1"
        assert error.severity == ErrorSeverity.LOW


class TestStoreErrors:
    """Tests for DynamoDB errors."""

    def test_store_error(self):
        error = StoreError("failed", table_name="stock", operation="Scan")

        assert error.status_code == 500
        assert error.context.table_name == "stock"
        assert error.context.additional_data["operation"] == "Scan"

    def test_conflict_is_a_store_error(self):
        error = ConflictError("exists", product_id="p1", table_name="products")

        assert isinstance(error, StoreError)
        assert error.category == ErrorCategory.CONFLICT
        assert error.operation == "TransactWriteItems"
        assert error.context.product_id == "p1"


class TestImportErrors:
    """Tests for S3 and parsing errors."""

    def test_storage_error(self):
        error = StorageError("Failed to download", bucket="b", key="uploaded/a.csv")

        assert error.context.s3_bucket == "b"
        assert error.context.s3_key == "uploaded/a.csv"
        assert error.operation == "GetObject"

    def test_relocation_error(self):
        error = RelocationError(
            "copy failed",
            bucket="b",
            key="uploaded/a.csv",
            destination_key="processed/a.csv",
            operation="CopyObject",
        )

        assert isinstance(error, StorageError)
        assert error.context.additional_data["destination_key"] == "processed/a.csv"

    def test_parse_error(self):
        error = ParseError("empty", s3_key="uploaded/a.csv")

        assert error.category == ErrorCategory.PARSING
        assert error.context.s3_key == "uploaded/a.csv"
        assert error.status_code == 500
        assert error.to_dict()["status_code"] == 500

    def test_import_batch_error(self):
        first = ParseError("empty")
        error = ImportBatchError({"s3://b/uploaded/z.csv": first, "s3://b/uploaded/a.csv": ValueError()})

        assert "2 file(s)" in error.message
        assert error.context.additional_data["failed_keys"] == [
            "s3://b/uploaded/a.csv",
            "s3://b/uploaded/z.csv",
        ]
        assert error.original_exception is first
