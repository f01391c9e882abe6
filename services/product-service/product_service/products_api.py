"""
API Gateway handlers for the products API.

    GET  /products       -> get_products_list
    GET  /products/{id}  -> get_product_by_id
    POST /products       -> create_product
"""

import base64
import binascii
import json
import logging
from typing import Any, Optional

from pydantic import ValidationError as SchemaValidationError

from product_service.config import get_settings
from product_service.exceptions import (
    NotFoundError,
    ProductServiceError,
    ValidationError,
)
from product_service.logging_config import (
    bind_invocation,
    configure_logging,
    log_execution_time,
)
from product_service.models import ProductCreate, is_valid_uuid
from product_service.responses import (
    bad_request,
    created,
    internal_error,
    not_found,
    ok_item,
    ok_list,
)
from product_service.store import get_product_store

configure_logging(level=get_settings().log_level, service_name="product-service")
logger = logging.getLogger(__name__)


def _error_response(error: Exception) -> dict:
    """Map an exception to a response without leaking store details."""
    if isinstance(error, ValidationError):
        return bad_request(error.message)
    if isinstance(error, NotFoundError):
        return not_found(error.message)
    if isinstance(error, ProductServiceError):
        logger.error(
            f"Product service error: {error.message}",
            extra={"extra_data": error.to_dict()},
        )
        return internal_error()
    logger.error(f"Unexpected error: {error}", exc_info=True)
    return internal_error()


def _read_body(event: dict) -> Optional[str]:
    body = event.get("body")
    if body and event.get("isBase64Encoded"):
        try:
            body = base64.b64decode(body).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            raise ValidationError("Request body is not valid base64", field_name="body")
    return body


def parse_product_body(body: Optional[str]) -> ProductCreate:
    """
    Validate a create request body.

    Raises:
        ValidationError: Body missing, not a JSON object, bad id or bad fields
    """
    if not body:
        raise ValidationError("Request body is required", field_name="body")

    try:
        payload = json.loads(body)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON body: {e.msg}", field_name="body")

    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object", field_name="body")

    product_id = payload.get("id")
    if product_id is not None and not is_valid_uuid(product_id):
        raise ValidationError(
            "Invalid product ID format", field_name="id", actual=product_id
        )
    # Checked only; the store always generates the id.
    payload = {key: value for key, value in payload.items() if key != "id"}

    try:
        return ProductCreate.model_validate(payload)
    except SchemaValidationError as e:
        first = e.errors()[0]
        field_name = ".".join(str(part) for part in first["loc"])
        raise ValidationError(
            f"Invalid field '{field_name}': {first['msg']}",
            field_name=field_name,
            actual=first.get("input"),
        )


@log_execution_time(logger)
def get_products_list(event: dict, context: Any) -> dict:
    bind_invocation(event, context)
    logger.info("Get products list")

    try:
        products = get_product_store().fetch_products()
    except Exception as e:
        return _error_response(e)

    return ok_list(products)


@log_execution_time(logger)
def get_product_by_id(event: dict, context: Any) -> dict:
    bind_invocation(event, context)

    product_id = (event.get("pathParameters") or {}).get("id")
    if not product_id:
        return bad_request("Product ID is required")

    logger.info(f"Get product {product_id}", extra={"product_id": product_id})

    try:
        product = get_product_store().fetch_product_by_id(product_id)
    except Exception as e:
        return _error_response(e)

    return ok_item(product)


@log_execution_time(logger)
def create_product(event: dict, context: Any) -> dict:
    bind_invocation(event, context)
    logger.info("Create product")

    try:
        data = parse_product_body(_read_body(event))
        product = get_product_store().create_product(data)
    except Exception as e:
        return _error_response(e)

    return created(product)
