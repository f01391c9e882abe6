"""
Seed the products and stock tables.

    product-seed products.json
    product-seed --catalog

The JSON file holds a list of products (``id``, ``title``, ``description``,
``price``, ``count``); each one is written to the products table and its
``count`` to the stock table. Existing items with the same id are overwritten.
"""

import argparse
import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import TypeAdapter
from pydantic import ValidationError as SchemaValidationError

from product_service.catalog import MOCK_PRODUCTS
from product_service.config import get_settings
from product_service.exceptions import ProductServiceError, ValidationError
from product_service.logging_config import configure_logging
from product_service.models import Product
from product_service.store import DynamoProductStore

logger = logging.getLogger(__name__)

_product_list = TypeAdapter(list[Product])


def load_products(path: Path) -> list[Product]:
    """
    Read a JSON list of products.

    Raises:
        ValidationError: The file is not JSON or an entry is not a product
    """
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValidationError(f"{path} is not valid JSON: {e.msg}", field_name="path")

    try:
        return _product_list.validate_python(payload)
    except SchemaValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise ValidationError(
            f"Invalid product at {location}: {first['msg']}",
            field_name=location,
        )


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed the products and stock tables.")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "path",
        nargs="?",
        type=Path,
        help="JSON file with a list of products.",
    )
    source.add_argument(
        "--catalog",
        action="store_true",
        help="Seed the built-in sample catalog instead of a file.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None, store: Optional[DynamoProductStore] = None) -> int:
    args = parse_args(argv)
    configure_logging(level=get_settings().log_level, service_name="product-seed")

    try:
        products = list(MOCK_PRODUCTS) if args.catalog else load_products(args.path)
        store = store or DynamoProductStore.from_settings()
        uploaded = store.put_products(products)
    except OSError as e:
        logger.error(f"Could not read seed file: {e}")
        return 1
    except ProductServiceError as e:
        logger.error(f"Seeding failed: {e.message}", extra={"extra_data": e.to_dict()})
        return 1

    logger.info(
        f"Seeded {uploaded} products into {store.products_table} and {store.stocks_table}"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
