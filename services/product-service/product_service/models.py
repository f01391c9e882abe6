"""
Data models shared by the products API and the CSV import pipeline.
"""

import uuid
from enum import Enum
from typing import Optional
from urllib.parse import unquote_plus

from pydantic import BaseModel, Field, field_validator


class Product(BaseModel):
    """
    Product as returned by the API. ``count`` is merged in from the stock
    table at read time.
    """
    id: str
    title: str
    description: str = ""
    price: float
    count: int = 0


class Stock(BaseModel):
    """Stock record, one per product, keyed by ``product_id``."""
    product_id: str
    count: int = 0


class ProductCreate(BaseModel):
    """Body of ``POST /products``. The id is optional and generated when absent."""
    id: Optional[str] = None
    title: str = Field(..., min_length=1)
    description: str = ""
    price: float = Field(..., ge=0)
    count: int = Field(0, ge=0)

    @field_validator("id")
    @classmethod
    def check_uuid(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not is_valid_uuid(value):
            raise ValueError("Invalid product ID format")
        return value


def is_valid_uuid(value) -> bool:
    """True for a canonical hyphenated UUID string."""
    if not isinstance(value, str):
        return False
    try:
        return str(uuid.UUID(value)) == value.lower()
    except ValueError:
        return False


class ImportState(Enum):
    """Lifecycle of an uploaded file, encoded in its key prefix."""
    UPLOADED = "uploaded"
    PROCESSING = "processing"
    PROCESSED = "processed"
    ERROR = "error"


class S3ObjectRef(BaseModel):
    """Bucket and decoded key of one object named in an S3 event record."""
    bucket: str
    key: str

    @classmethod
    def from_event_record(cls, record: dict) -> "S3ObjectRef":
        s3 = record["s3"]
        return cls(
            bucket=s3["bucket"]["name"],
            key=unquote_plus(s3["object"]["key"]),
        )

    def with_prefix(self, source_prefix: str, target_prefix: str) -> str:
        """
        Key with the first occurrence of ``source_prefix`` swapped for
        ``target_prefix``. A key without the source prefix gets the target
        prepended, so a move never copies an object onto itself.
        """
        if source_prefix in self.key:
            return self.key.replace(source_prefix, target_prefix, 1)
        return f"{target_prefix}{self.key}"

    @property
    def uri(self) -> str:
        return f"s3://{self.bucket}/{self.key}"


class ImportRecord(BaseModel):
    """One accepted CSV row. Columns outside the known fields are kept as extras."""
    id: str
    title: str
    description: str = ""
    price: float = 0.0
    count: float = 0.0

    class Config:
        extra = "allow"

    def to_product_create(self) -> ProductCreate:
        return ProductCreate(
            id=self.id if is_valid_uuid(self.id) else None,
            title=self.title,
            description=self.description,
            price=max(self.price, 0.0),
            count=max(int(self.count), 0),
        )


class ImportResult(BaseModel):
    """Outcome of processing one uploaded object."""
    bucket: str
    key: str
    state: ImportState
    destination_key: str
    record_count: int = 0
    skipped_count: int = 0
    persisted_count: int = 0

    def to_summary(self) -> dict:
        return self.model_dump(mode="json")
