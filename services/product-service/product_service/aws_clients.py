"""
Process-wide boto3 clients, created lazily on first use and reused across
warm invocations.
"""

import boto3
from botocore.config import Config

from product_service.config import get_settings

boto_config = Config(
    retries={"max_attempts": 3, "mode": "adaptive"},
    connect_timeout=10,
    read_timeout=60,
)
s3_config = boto_config.merge(Config(signature_version="s3v4"))


class AWSClientFactory:
    """Factory for creating AWS clients with proper configuration."""

    _s3_client = None
    _dynamodb_client = None

    @staticmethod
    def _client_kwargs(config: Config) -> dict:
        settings = get_settings()
        kwargs = {"config": config, "region_name": settings.aws_region}
        if settings.aws_endpoint_url:
            kwargs["endpoint_url"] = settings.aws_endpoint_url
        return kwargs

    @classmethod
    def get_s3_client(cls):
        """Get or create S3 client."""
        if cls._s3_client is None:
            cls._s3_client = boto3.client("s3", **cls._client_kwargs(s3_config))
        return cls._s3_client

    @classmethod
    def get_dynamodb_client(cls):
        """Get or create DynamoDB client."""
        if cls._dynamodb_client is None:
            cls._dynamodb_client = boto3.client(
                "dynamodb", **cls._client_kwargs(boto_config)
            )
        return cls._dynamodb_client

    @classmethod
    def reset(cls):
        """Reset clients (useful for testing)."""
        cls._s3_client = None
        cls._dynamodb_client = None
