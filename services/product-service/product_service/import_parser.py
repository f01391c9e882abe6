"""
S3-triggered import of product CSV files.

Every object named in the event is read, parsed and moved out of
``uploaded/``: to ``processed/`` when everything worked, otherwise to
``error/``. Objects are handled concurrently and independently; the
invocation fails when any of them failed, without undoing the moves of the
others.
"""

import contextvars
import json
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Optional

from botocore.exceptions import BotoCoreError, ClientError

from product_service.aws_clients import AWSClientFactory
from product_service.config import Settings, get_settings
from product_service.csv_parser import parse_products_csv
from product_service.exceptions import (
    ConfigurationError,
    ImportBatchError,
    ParseError,
    RelocationError,
    StorageError,
)
from product_service.logging_config import (
    bind_invocation,
    configure_logging,
    log_execution_time,
    object_logger,
)
from product_service.models import ImportRecord, ImportResult, ImportState, S3ObjectRef
from product_service.store import get_product_store

configure_logging(level=get_settings().log_level, service_name="import-service")
logger = logging.getLogger(__name__)


class ImportFileProcessor:
    """Reads, parses and relocates one uploaded object at a time."""

    def __init__(self, s3_client, settings: Settings, store=None):
        self.s3 = s3_client
        self.settings = settings
        self.store = store

    def read_object(self, ref: S3ObjectRef) -> str:
        """
        Download the whole object as text.

        Raises:
            StorageError: GetObject failed
            ParseError: The content is not UTF-8
        """
        try:
            response = self.s3.get_object(Bucket=ref.bucket, Key=ref.key)
            raw = response["Body"].read()
        except (ClientError, BotoCoreError) as e:
            raise StorageError(
                message=f"Failed to download {ref.uri}: {e}",
                bucket=ref.bucket,
                key=ref.key,
                original_exception=e,
            )

        try:
            content = raw.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ParseError(f"File is not valid UTF-8: {e}", s3_key=ref.key)

        logger.info(
            f"Downloaded {len(raw)} bytes from S3",
            extra={"s3_bucket": ref.bucket, "s3_key": ref.key},
        )
        return content

    def move_object(self, ref: S3ObjectRef, destination_key: str) -> None:
        """
        Copy the object to ``destination_key`` in the same bucket, then
        delete the original.

        Raises:
            RelocationError: The copy or the delete failed
        """
        for operation, call in (
            (
                "CopyObject",
                lambda: self.s3.copy_object(
                    Bucket=ref.bucket,
                    CopySource={"Bucket": ref.bucket, "Key": ref.key},
                    Key=destination_key,
                ),
            ),
            (
                "DeleteObject",
                lambda: self.s3.delete_object(Bucket=ref.bucket, Key=ref.key),
            ),
        ):
            try:
                call()
            except (ClientError, BotoCoreError) as e:
                raise RelocationError(
                    message=f"{operation} failed moving {ref.uri} to {destination_key}: {e}",
                    bucket=ref.bucket,
                    key=ref.key,
                    destination_key=destination_key,
                    operation=operation,
                    original_exception=e,
                )

    def process(self, ref: S3ObjectRef) -> ImportResult:
        """
        Import one object.

        Any failure moves the object to the error prefix on a best-effort
        basis and is re-raised unchanged.
        """
        log = object_logger(logger, ref.bucket, ref.key)
        log.info(f"Processing file: {ref.uri}")

        processed_key = ref.with_prefix(
            self.settings.upload_prefix, self.settings.processed_prefix
        )

        try:
            parsed = parse_products_csv(self.read_object(ref), source=ref.key)
            log.info(f"Parsed {parsed.record_count} products from {ref.key}")
            for record in parsed.records:
                log.info(f"Product: {json.dumps(record.model_dump())}")

            persisted = self._persist(parsed.records)
            self.move_object(ref, processed_key)
        except Exception as e:
            log.error(f"Error processing file {ref.key}: {e}")
            self._move_to_error(ref, log)
            raise

        log.info(f"Successfully processed and moved file to: s3://{ref.bucket}/{processed_key}")
        return ImportResult(
            bucket=ref.bucket,
            key=ref.key,
            state=ImportState.PROCESSED,
            destination_key=processed_key,
            record_count=parsed.record_count,
            skipped_count=parsed.skipped_count,
            persisted_count=persisted,
        )

    def _persist(self, records: list[ImportRecord]) -> int:
        if not self.settings.import_persist_records or self.store is None:
            return 0
        for record in records:
            data = record.to_product_create()
            self.store.create_product(data, product_id=data.id)
        return len(records)

    def _move_to_error(self, ref: S3ObjectRef, log) -> None:
        error_key = ref.with_prefix(self.settings.upload_prefix, self.settings.error_prefix)
        try:
            self.move_object(ref, error_key)
        except Exception as move_error:
            # Left in place under uploaded/ for an operator to deal with.
            log.error(f"Failed to move file to error folder: {move_error}")
            return
        log.info(f"Moved failed file to: s3://{ref.bucket}/{error_key}")


def process_concurrently(
    process: Callable[[S3ObjectRef], ImportResult],
    refs: list[S3ObjectRef],
    max_workers: int,
) -> tuple[list[ImportResult], dict[str, Exception]]:
    """
    Run ``process`` for every ref on a thread pool and wait for all of them.

    Returns the successful results and the failures keyed by object URI. A
    key listed more than once keeps every failure, the repeats suffixed
    with ``#2``, ``#3`` and so on.
    """
    results: list[ImportResult] = []
    failures: dict[str, Exception] = {}

    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(refs)))) as executor:
        futures = [
            (ref.uri, executor.submit(contextvars.copy_context().run, process, ref))
            for ref in refs
        ]
        for uri, future in futures:
            try:
                results.append(future.result())
            except Exception as e:
                key, repeat = uri, 1
                while key in failures:
                    repeat += 1
                    key = f"{uri}#{repeat}"
                failures[key] = e

    return results, failures


@log_execution_time(logger)
def handler(event: dict, context: Any, processor: Optional[ImportFileProcessor] = None) -> dict:
    """
    Lambda handler for S3 ObjectCreated notifications on ``uploaded/*.csv``.

    Raises:
        ConfigurationError: The event has no records, or a malformed one
        ImportBatchError: At least one object failed to import
    """
    bind_invocation(event, context)
    logger.info("Received S3 event", extra={"extra_data": {"records": len(event.get("Records") or [])}})

    records = event.get("Records") or []
    if not records:
        raise ConfigurationError(
            message="Invalid event structure: missing Records",
            config_key="event.Records",
        )

    settings = get_settings()
    if processor is None:
        store = get_product_store(settings) if settings.import_persist_records else None
        processor = ImportFileProcessor(AWSClientFactory.get_s3_client(), settings, store)

    try:
        refs = [S3ObjectRef.from_event_record(record) for record in records]
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise ConfigurationError(
            message=f"Invalid event structure: malformed record ({e!r})",
            config_key="event.Records",
        )
    results, failures = process_concurrently(
        processor.process, refs, settings.import_max_workers
    )

    if failures:
        logger.error(
            f"Error processing files: {len(failures)} of {len(refs)} failed",
            extra={"metrics": {"processed": len(results), "failed": len(failures)}},
        )
        raise ImportBatchError(failures)

    logger.info(
        "Successfully processed all files",
        extra={"metrics": {"processed": len(results)}},
    )
    return {
        "processed": [result.to_summary() for result in results],
        "total": len(results),
    }
