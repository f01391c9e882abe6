"""Pytest fixtures and configuration."""

import io
import os

import pytest
from botocore.exceptions import ClientError

os.environ["AWS_DEFAULT_REGION"] = "us-east-1"
os.environ["AWS_REGION"] = "us-east-1"
os.environ["AWS_ACCESS_KEY_ID"] = "testing"
os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
os.environ["S3_BUCKET_NAME"] = "test-import-bucket"
os.environ.pop("AWS_ENDPOINT_URL", None)
os.environ.pop("AWS_PROFILE", None)

from product_service.aws_clients import AWSClientFactory  # noqa: E402
from product_service.config import reset_settings  # noqa: E402
from product_service.models import Product  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_settings():
    """Re-read the environment and drop cached clients around every test."""
    reset_settings()
    AWSClientFactory.reset()
    yield
    reset_settings()
    AWSClientFactory.reset()


def client_error(code: str, operation: str, message: str = "boom", **extra) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}, **extra}, operation)


class FakeS3:
    """
    In-memory stand-in for the S3 client calls used by the import parser.

    ``fail_on`` holds ``(operation, key)`` pairs that raise instead of
    running, e.g. ``("CopyObject", "error/b.csv")``.
    """

    def __init__(self, objects: dict = None):
        self.objects: dict[tuple[str, str], bytes] = dict(objects or {})
        self.fail_on: set[tuple[str, str]] = set()
        self.calls: list[tuple[str, str]] = []

    def put(self, bucket: str, key: str, content: str) -> None:
        self.objects[(bucket, key)] = content.encode("utf-8")

    def exists(self, bucket: str, key: str) -> bool:
        return (bucket, key) in self.objects

    def _check(self, operation: str, key: str) -> None:
        self.calls.append((operation, key))
        if (operation, key) in self.fail_on:
            raise client_error("InternalError", operation)

    def get_object(self, Bucket, Key):
        self._check("GetObject", Key)
        if (Bucket, Key) not in self.objects:
            raise client_error("NoSuchKey", "GetObject", "The specified key does not exist.")
        return {"Body": io.BytesIO(self.objects[(Bucket, Key)])}

    def copy_object(self, Bucket, CopySource, Key):
        self._check("CopyObject", Key)
        source = (CopySource["Bucket"], CopySource["Key"])
        if source not in self.objects:
            raise client_error("NoSuchKey", "CopyObject", "The specified key does not exist.")
        self.objects[(Bucket, Key)] = self.objects[source]
        return {}

    def delete_object(self, Bucket, Key):
        self._check("DeleteObject", Key)
        self.objects.pop((Bucket, Key), None)
        return {}


@pytest.fixture
def fake_s3():
    return FakeS3()


def s3_event(*keys: str, bucket: str = "test-import-bucket") -> dict:
    """S3 ObjectCreated event with one record per key (keys as S3 encodes them)."""
    return {
        "Records": [
            {
                "eventSource": "aws:s3",
                "eventName": "ObjectCreated:Put",
                "s3": {
                    "bucket": {"name": bucket},
                    "object": {"key": key},
                },
            }
            for key in keys
        ]
    }


def api_event(
    path_parameters: dict = None,
    query: dict = None,
    body: str = None,
) -> dict:
    return {
        "requestContext": {"requestId": "req-123"},
        "pathParameters": path_parameters,
        "queryStringParameters": query,
        "body": body,
        "isBase64Encoded": False,
    }


@pytest.fixture
def valid_csv():
    return (
        "id,title,description,price,count\n"
        "7567ec4b-b10c-48c5-9345-fc73c48a80aa,Guitar,Acoustic guitar,199.99,4\n"
        "7567ec4b-b10c-48c5-9345-fc73c48a80a1,Drum,Snare drum,89.5,2\n"
    )


@pytest.fixture
def sample_products():
    return [
        Product(
            id="7567ec4b-b10c-48c5-9345-fc73c48a80aa",
            title="Guitar",
            description="Acoustic guitar",
            price=199.99,
            count=4,
        ),
        Product(
            id="7567ec4b-b10c-48c5-9345-fc73c48a80a1",
            title="Drum",
            description="Snare drum",
            price=89.5,
            count=2,
        ),
    ]


class FakeLambdaContext:
    aws_request_id = "lambda-req-1"
    function_name = "test-function"
