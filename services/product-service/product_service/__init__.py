"""
Product Service Lambdas - serverless products API and CSV import.

Lambda entry points:
    product_service.products_api.get_products_list
    product_service.products_api.get_product_by_id
    product_service.products_api.create_product
    product_service.import_api.import_products_file
    product_service.import_parser.handler
"""

from product_service.exceptions import (
    ConfigurationError,
    ConflictError,
    ImportBatchError,
    NotFoundError,
    ParseError,
    ProductServiceError,
    RelocationError,
    StorageError,
    StoreError,
    ValidationError,
)
from product_service.models import ImportRecord, ImportResult, Product, ProductCreate, Stock

__all__ = [
    "Product",
    "ProductCreate",
    "Stock",
    "ImportRecord",
    "ImportResult",
    "ProductServiceError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "StoreError",
    "StorageError",
    "RelocationError",
    "ParseError",
    "ConfigurationError",
    "ImportBatchError",
]

__version__ = "1.0.0"
