"""
Environment-driven settings shared by every Lambda in the service.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):

    # AWS
    aws_region: str = "us-east-2"
    aws_endpoint_url: Optional[str] = None

    # DynamoDB
    products_table_name: str = "products"
    stocks_table_name: str = "stock"
    scan_page_size: int = Field(25, gt=0)
    product_source: Literal["dynamodb", "mock"] = "dynamodb"

    # S3 import
    s3_bucket_name: Optional[str] = None
    url_expiration: int = Field(300, gt=0)
    upload_prefix: str = "uploaded/"
    processed_prefix: str = "processed/"
    error_prefix: str = "error/"
    import_max_workers: int = Field(8, gt=0)
    import_persist_records: bool = False

    # Logging
    log_level: str = "INFO"

    class Config:
        case_sensitive = False


@lru_cache
def get_settings() -> Settings:
    return Settings()


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    get_settings.cache_clear()
