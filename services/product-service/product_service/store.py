"""
Data access layer for the products and stock DynamoDB tables.

Products and their stock live in separate tables; reads merge the stock
count into the product, and creation writes both items in one transaction
so a product never exists without its stock record or the other way round.
"""

import logging
import uuid
from decimal import Decimal
from typing import Optional

from boto3.dynamodb.types import TypeDeserializer, TypeSerializer
from botocore.exceptions import BotoCoreError, ClientError

from product_service.aws_clients import AWSClientFactory
from product_service.catalog import MockProductStore
from product_service.config import Settings, get_settings
from product_service.exceptions import (
    ConflictError,
    ErrorContext,
    NotFoundError,
    StoreError,
)
from product_service.models import Product, ProductCreate, Stock

logger = logging.getLogger(__name__)

BATCH_WRITE_LIMIT = 25
MAX_UNPROCESSED_PASSES = 5

_serializer = TypeSerializer()
_deserializer = TypeDeserializer()


def serialize_item(item: dict) -> dict:
    """Plain dict to DynamoDB attribute values. Floats go through Decimal."""
    return {
        key: _serializer.serialize(
            Decimal(str(value)) if isinstance(value, float) else value
        )
        for key, value in item.items()
    }


def deserialize_item(item: dict) -> dict:
    return {key: _deserializer.deserialize(value) for key, value in item.items()}


def _is_condition_failure(error: ClientError) -> bool:
    if error.response.get("Error", {}).get("Code") != "TransactionCanceledException":
        return False
    reasons = error.response.get("CancellationReasons") or []
    if reasons:
        return any(r.get("Code") == "ConditionalCheckFailed" for r in reasons)
    return "ConditionalCheckFailed" in str(error)


class DynamoProductStore:
    """Product and stock access backed by two DynamoDB tables."""

    def __init__(
        self,
        client,
        products_table: str = "products",
        stocks_table: str = "stock",
        page_size: int = 25,
    ):
        self.client = client
        self.products_table = products_table
        self.stocks_table = stocks_table
        self.page_size = page_size

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "DynamoProductStore":
        settings = settings or get_settings()
        return cls(
            AWSClientFactory.get_dynamodb_client(),
            products_table=settings.products_table_name,
            stocks_table=settings.stocks_table_name,
            page_size=settings.scan_page_size,
        )

    def fetch_product_by_id(self, product_id: str) -> Product:
        """
        Fetch one product with its stock count merged in.

        Raises:
            NotFoundError: No product with this id
            StoreError: The lookup itself failed
        """
        try:
            response = self.client.get_item(
                TableName=self.products_table,
                Key=serialize_item({"id": product_id}),
            )
        except (ClientError, BotoCoreError) as e:
            raise StoreError(
                message="Could not fetch product",
                table_name=self.products_table,
                operation="GetItem",
                context=ErrorContext(product_id=product_id),
                original_exception=e,
            )

        item = response.get("Item")
        if item is None:
            logger.info(f"Product with ID {product_id} not found")
            raise NotFoundError(
                message=f"Product with ID {product_id} not found",
                product_id=product_id,
                table_name=self.products_table,
            )

        product = deserialize_item(item)
        product["count"] = self.fetch_stock_count(product_id)
        return Product.model_validate(product)

    def fetch_stock_count(self, product_id: str) -> int:
        try:
            response = self.client.get_item(
                TableName=self.stocks_table,
                Key=serialize_item({"product_id": product_id}),
            )
        except (ClientError, BotoCoreError) as e:
            raise StoreError(
                message="Could not fetch stock",
                table_name=self.stocks_table,
                operation="GetItem",
                context=ErrorContext(product_id=product_id),
                original_exception=e,
            )
        item = response.get("Item")
        if item is None:
            return 0
        return Stock.model_validate(deserialize_item(item)).count

    def fetch_products(self) -> list[Product]:
        """
        Fetch one page of products and merge their stock counts.

        Only the first ``page_size`` products are returned; the scan is not
        continued. Products without stock get ``count = 0``.
        """
        try:
            response = self.client.scan(
                TableName=self.products_table,
                Limit=self.page_size,
            )
        except (ClientError, BotoCoreError) as e:
            raise StoreError(
                message="Could not fetch products",
                table_name=self.products_table,
                operation="Scan",
                original_exception=e,
            )

        items = [deserialize_item(item) for item in response.get("Items", [])]
        if not items:
            return []

        stocks = self.fetch_stocks()
        return [
            Product.model_validate({**item, "count": stocks.get(item["id"], 0)})
            for item in items
        ]

    def fetch_stocks(self) -> dict[str, int]:
        """Scan the whole stock table into a ``product_id -> count`` map."""
        stocks: dict[str, int] = {}
        kwargs = {"TableName": self.stocks_table, "Limit": self.page_size}

        while True:
            try:
                response = self.client.scan(**kwargs)
            except (ClientError, BotoCoreError) as e:
                raise StoreError(
                    message="Could not fetch stocks",
                    table_name=self.stocks_table,
                    operation="Scan",
                    original_exception=e,
                )

            for item in response.get("Items", []):
                stock = Stock.model_validate(deserialize_item(item))
                stocks[stock.product_id] = stock.count

            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                return stocks
            kwargs["ExclusiveStartKey"] = last_key

    def create_product(
        self, data: ProductCreate, product_id: Optional[str] = None
    ) -> Product:
        """
        Create a product and its stock record in a single transaction.

        The product gets a fresh ``uuid4`` id unless ``product_id`` is given;
        ``data.id`` is never used as the key.

        Both puts are conditioned on the key not existing yet, so either
        both items are written or neither is.

        Raises:
            ConflictError: The product or its stock record already exists
            StoreError: The transaction failed for any other reason
        """
        product_id = product_id or str(uuid.uuid4())

        product_item = {
            "id": product_id,
            "title": data.title,
            "description": data.description,
            "price": data.price,
        }
        stock_item = {"product_id": product_id, "count": data.count}

        try:
            self.client.transact_write_items(
                TransactItems=[
                    {
                        "Put": {
                            "TableName": self.products_table,
                            "Item": serialize_item(product_item),
                            "ConditionExpression": "attribute_not_exists(id)",
                        }
                    },
                    {
                        "Put": {
                            "TableName": self.stocks_table,
                            "Item": serialize_item(stock_item),
                            "ConditionExpression": "attribute_not_exists(product_id)",
                        }
                    },
                ]
            )
        except ClientError as e:
            if _is_condition_failure(e):
                raise ConflictError(
                    message=f"Product {product_id} already exists",
                    product_id=product_id,
                    table_name=self.products_table,
                    original_exception=e,
                )
            raise StoreError(
                message="Could not create product",
                table_name=self.products_table,
                operation="TransactWriteItems",
                context=ErrorContext(product_id=product_id),
                original_exception=e,
            )
        except BotoCoreError as e:
            raise StoreError(
                message="Could not create product",
                table_name=self.products_table,
                operation="TransactWriteItems",
                context=ErrorContext(product_id=product_id),
                original_exception=e,
            )

        logger.info(
            f"Created product {product_id}",
            extra={"product_id": product_id, "table_name": self.products_table},
        )
        return Product(**product_item, count=stock_item["count"])

    def put_products(self, products: list[Product]) -> int:
        """
        Seed both tables with the given products, 25 items per batch.

        Unlike ``create_product`` this overwrites existing items and is not
        transactional across the two tables.
        """
        product_items = [
            {
                "id": p.id,
                "title": p.title,
                "description": p.description,
                "price": p.price,
            }
            for p in products
        ]
        stock_items = [{"product_id": p.id, "count": p.count} for p in products]

        self._batch_put(self.products_table, product_items)
        self._batch_put(self.stocks_table, stock_items)

        logger.info(
            f"Uploaded {len(products)} products",
            extra={"metrics": {"products": len(products), "stocks": len(stock_items)}},
        )
        return len(products)

    def _batch_put(self, table_name: str, items: list[dict]) -> None:
        for start in range(0, len(items), BATCH_WRITE_LIMIT):
            chunk = items[start:start + BATCH_WRITE_LIMIT]
            request_items = {
                table_name: [
                    {"PutRequest": {"Item": serialize_item(item)}} for item in chunk
                ]
            }

            for _ in range(MAX_UNPROCESSED_PASSES):
                try:
                    response = self.client.batch_write_item(RequestItems=request_items)
                except (ClientError, BotoCoreError) as e:
                    raise StoreError(
                        message=f"Could not upload batch starting at item {start}",
                        table_name=table_name,
                        operation="BatchWriteItem",
                        original_exception=e,
                    )
                request_items = response.get("UnprocessedItems") or {}
                if not request_items:
                    break
            else:
                raise StoreError(
                    message=f"Unprocessed items left after {MAX_UNPROCESSED_PASSES} passes",
                    table_name=table_name,
                    operation="BatchWriteItem",
                )


def get_product_store(settings: Optional[Settings] = None):
    """Store selected by ``PRODUCT_SOURCE``: DynamoDB, or the static mock catalog."""
    settings = settings or get_settings()
    if settings.product_source == "mock":
        return MockProductStore()
    return DynamoProductStore.from_settings(settings)
