"""
Static product catalog used when ``PRODUCT_SOURCE=mock``.

Predates the DynamoDB tables; kept so the API can run without them.
"""

import logging
from typing import Optional

from product_service.exceptions import ConfigurationError, NotFoundError
from product_service.models import Product, ProductCreate

logger = logging.getLogger(__name__)

MOCK_PRODUCTS = [
    Product(
        id="7567ec4b-b10c-48c5-9345-fc73c48a80aa",
        title="ProductOne",
        description="Short Product Description1",
        price=24,
        count=1,
    ),
    Product(
        id="7567ec4b-b10c-48c5-9345-fc73c48a80a0",
        title="ProductNew",
        description="Short Product Description3",
        price=10,
        count=6,
    ),
    Product(
        id="7567ec4b-b10c-48c5-9345-fc73c48a80a2",
        title="ProductTop",
        description="Short Product Description2",
        price=23,
        count=7,
    ),
    Product(
        id="7567ec4b-b10c-48c5-9345-fc73c48a80a1",
        title="ProductTitle",
        description="Short Product Description7",
        price=15,
        count=12,
    ),
    Product(
        id="7567ec4b-b10c-48c5-9345-fc73c48a80a3",
        title="Product",
        description="Short Product Description2",
        price=23,
        count=7,
    ),
    Product(
        id="7567ec4b-b10c-48c5-9345-fc73348a80a1",
        title="ProductTest",
        description="Short Product Description4",
        price=15,
        count=8,
    ),
    Product(
        id="7567ec4b-b10c-48c5-9445-fc73c48a80a2",
        title="Product2",
        description="Short Product Descriptio1",
        price=23,
        count=2,
    ),
    Product(
        id="7567ec4b-b10c-45c5-9345-fc73c48a80a1",
        title="ProductName",
        description="Short Product Description7",
        price=15,
        count=3,
    ),
]


class MockProductStore:
    """Read-only store over ``MOCK_PRODUCTS``."""

    def __init__(self, products: list[Product] = None):
        self.products = list(MOCK_PRODUCTS if products is None else products)

    def fetch_products(self) -> list[Product]:
        return [p.model_copy() for p in self.products]

    def fetch_product_by_id(self, product_id: str) -> Product:
        for product in self.products:
            if product.id == product_id:
                return product.model_copy()
        raise NotFoundError(
            message=f"Product with ID {product_id} not found",
            product_id=product_id,
        )

    def create_product(
        self, data: ProductCreate, product_id: Optional[str] = None
    ) -> Product:
        raise ConfigurationError(
            message="The mock catalog is read-only",
            config_key="PRODUCT_SOURCE",
        )
