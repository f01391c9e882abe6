"""
Uniform API Gateway proxy responses.
"""

import json
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
}


def _json_default(o):
    if isinstance(o, Decimal):
        return int(o) if o % 1 == 0 else float(o)
    if isinstance(o, BaseModel):
        return o.model_dump(mode="json")
    raise TypeError(f"Object of type {type(o).__name__} is not JSON serializable")


def build_response(status_code: int, body: Any) -> dict:
    return {
        "statusCode": status_code,
        "headers": dict(DEFAULT_HEADERS),
        "body": json.dumps(body, default=_json_default),
    }


def error_response(
    status_code: int, message: str, detail: Optional[str] = None
) -> dict:
    body = {"success": False, "message": message}
    if detail is not None:
        body["errorMessage"] = detail
    return build_response(status_code, body)


def bad_request(detail: str) -> dict:
    return error_response(400, "Bad Request", detail)


def not_found(detail: str) -> dict:
    return error_response(404, "Not Found", detail)


def internal_error(detail: Optional[str] = None) -> dict:
    return error_response(500, "Internal Server Error", detail)


def ok(data: Any = None) -> dict:
    """200 with the raw payload as body."""
    return build_response(200, data)


def ok_list(items: list) -> dict:
    return build_response(200, {"success": True, "data": items, "total": len(items)})


def ok_item(item: Any) -> dict:
    return build_response(200, {"success": True, "data": item})


def created(data: Any = None) -> dict:
    return build_response(201, data)
