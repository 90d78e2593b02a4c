# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_resolver

from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

import anyio
import httpx
from loguru import logger

from coreason_resolver.config import ResolverConfig
from coreason_resolver.data_service import DataService
from coreason_resolver.exceptions import OperationCancelled, ServiceError
from coreason_resolver.factory import ResolverFactory
from coreason_resolver.integrations.audit import AuditIntegrator
from coreason_resolver.models import Outcome, RecordInspection, Report, TableColumns
from coreason_resolver.storage import ObjectStore

T = TypeVar("T")


class CancellationToken:
    """Aborts the in-flight outbound call of a resolution.

    ``cancel()`` must be called from the thread running the event loop.
    """

    def __init__(self) -> None:
        self.cancelled = False
        self._scopes: set[anyio.CancelScope] = set()

    def cancel(self) -> None:
        self.cancelled = True
        for scope in list(self._scopes):
            scope.cancel()

    @contextmanager
    def bind(self) -> Iterator[anyio.CancelScope]:
        """Opens a cancel scope that is cancelled together with this token."""
        with anyio.CancelScope() as scope:
            if self.cancelled:
                scope.cancel()
            self._scopes.add(scope)
            try:
                yield scope
            finally:
                self._scopes.discard(scope)


class ResolverAsync:
    """Async-native resource resolver (The Core).

    Resolves a record identifier to its linked document and payload, one
    record, one file, one attempt.
    """

    def __init__(
        self,
        config: ResolverConfig | None = None,
        data_service: DataService | None = None,
        object_store: ObjectStore | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        """Initializes the ResolverAsync service.

        Collaborators that are not injected are built from the configuration.

        Args:
            config: Configuration for the resolver.
            data_service: Optional relational data service.
            object_store: Optional object store.
            client: Optional httpx.AsyncClient for connection pooling.
        """
        self.config = config or ResolverConfig()
        self._internal_client = client is None
        # Calls are bounded by fail_after in _call, not by per-phase httpx timeouts.
        self._client = client or httpx.AsyncClient(timeout=None)
        self.data_service = data_service or ResolverFactory.get_data_service(self.config, self._client)
        self.object_store = object_store or ResolverFactory.get_object_store(self.config, self._client)
        self.audit = AuditIntegrator(enabled=self.config.enable_audit_logging)

    async def __aenter__(self) -> "ResolverAsync":
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Closes the HTTP client if the resolver created it."""
        if self._internal_client:
            await self._client.aclose()

    async def resolve(self, record_id: str, cancel: CancellationToken | None = None) -> Report:
        """Resolves a record to its linked document payload.

        Reads the record with its linked documents, takes the first document
        in service order and downloads its payload. Failures are captured in
        the report and never raised.

        Args:
            record_id: The opaque record identifier.
            cancel: Optional token aborting the in-flight outbound call.

        Returns:
            Report: The outcome of the resolution.

        Raises:
            ValueError: If record_id is empty.
        """
        if not isinstance(record_id, str) or not record_id.strip():
            raise ValueError("record_id must be a non-empty string")

        report = await self._resolve(record_id, cancel)
        self.audit.log_resolution(report)
        return report

    async def _resolve(self, record_id: str, cancel: CancellationToken | None) -> Report:
        logger.info(f"Checking record: {record_id}")

        try:
            record = await self._call(lambda: self.data_service.fetch_record(record_id), cancel)
        except (ServiceError, TimeoutError, OperationCancelled) as e:
            message, detail = _describe(e)
            logger.error(f"Database Error: {message} {detail}")
            return Report(
                outcome=Outcome.DATA_SERVICE_ERROR,
                record_id=record_id,
                message=message,
                detail=detail,
            )

        if record is None:
            logger.warning(f"Record {record_id} not found.")
            return Report(outcome=Outcome.NOT_FOUND, record_id=record_id, message="Record not found.")

        logger.debug(f"Record: {record.model_dump_json()}")

        document = record.first_document()
        if document is None:
            logger.warning(f"No document linked to record {record_id}.")
            return Report(
                outcome=Outcome.MISSING_LINKAGE,
                record_id=record_id,
                record=record,
                message="No linked document.",
            )
        if not document.storage_path:
            logger.warning(f"Linked document {document.filename!r} of {record_id} has no storage path.")
            return Report(
                outcome=Outcome.MISSING_LINKAGE,
                record_id=record_id,
                record=record,
                message="Linked document has no storage path.",
            )

        storage_path = document.storage_path
        logger.info(f'Attempting download for path: "{storage_path}"')

        try:
            payload = await self._call(lambda: self.object_store.download(storage_path), cancel)
        except (ServiceError, TimeoutError, OperationCancelled) as e:
            message, detail = _describe(e)
            logger.error(f"Storage Download Failed: {message} {detail}")
            return Report(
                outcome=Outcome.STORAGE_FETCH_ERROR,
                record_id=record_id,
                record=record,
                storage_path=storage_path,
                message=message,
                detail=detail,
            )

        logger.info(f"Download Successful! Size: {payload.size} bytes, Type: {payload.content_type}")
        return Report(
            outcome=Outcome.SUCCESS,
            record_id=record_id,
            record=record,
            storage_path=storage_path,
            size=payload.size,
            content_type=payload.content_type,
            message="Download successful.",
        )

    async def inspect_table(self, table: str, cancel: CancellationToken | None = None) -> TableColumns:
        """Lists the column names of a table from a sample row.

        Args:
            table: The table name.
            cancel: Optional token aborting the outbound call.

        Returns:
            TableColumns: The columns found; empty if the table has no rows.
        """
        if not table or not table.strip():
            raise ValueError("table must be a non-empty string")

        logger.info(f"Checking columns for '{table}'...")
        try:
            row = await self._call(lambda: self.data_service.fetch_sample_row(table), cancel)
        except (ServiceError, TimeoutError, OperationCancelled) as e:
            message, detail = _describe(e)
            logger.error(f"Error fetching {table}: {message}")
            return TableColumns(table=table, error=detail)

        if row is None:
            logger.info(f"No rows found in '{table}' to inspect.")
            return TableColumns(table=table)

        return TableColumns(table=table, columns=list(row.keys()))

    async def inspect_record(self, record_id: str, cancel: CancellationToken | None = None) -> RecordInspection:
        """Reads a record and its documents separately, without the join.

        When the joined read fails or comes back without documents, this shows
        whether the record row exists and which document rows point at it.

        Args:
            record_id: The opaque record identifier.
            cancel: Optional token aborting the outbound calls.

        Returns:
            RecordInspection: The raw rows and any per-read error detail.
        """
        if not isinstance(record_id, str) or not record_id.strip():
            raise ValueError("record_id must be a non-empty string")

        logger.info(f"--- Inspecting record {record_id} ---")
        inspection = RecordInspection(record_id=record_id)

        try:
            rows = await self._call(
                lambda: self.data_service.fetch_rows(self.config.records_table, "id", record_id), cancel
            )
            inspection.record = rows[0] if rows else None
        except (ServiceError, TimeoutError, OperationCancelled) as e:
            message, inspection.record_error = _describe(e)
            logger.error(f"Error reading {self.config.records_table}: {message}")

        try:
            inspection.documents = await self._call(
                lambda: self.data_service.fetch_rows(
                    self.config.documents_relation, self.config.documents_foreign_key, record_id
                ),
                cancel,
            )
        except (ServiceError, TimeoutError, OperationCancelled) as e:
            message, inspection.documents_error = _describe(e)
            logger.error(f"Error reading {self.config.documents_relation}: {message}")

        return inspection

    async def _call(self, call: Callable[[], Awaitable[T]], cancel: CancellationToken | None) -> T:
        """Runs one outbound call under the request timeout and cancellation token."""
        if cancel is not None and cancel.cancelled:
            raise OperationCancelled("Cancelled before the request was sent")

        with anyio.fail_after(self.config.request_timeout):
            if cancel is None:
                return await call()
            with cancel.bind():
                return await call()

        # Only reached when the token's scope swallowed the cancellation.
        raise OperationCancelled("Cancelled while the request was in flight")


def _describe(error: BaseException) -> tuple[str, dict[str, Any]]:
    """Maps a captured failure to a report message and detail."""
    if isinstance(error, ServiceError):
        return error.message, error.detail
    if isinstance(error, TimeoutError):
        return "Request timed out.", {"code": "timeout"}
    return "Request cancelled.", {"code": "cancelled"}


class Resolver:
    """Sync Facade for ResolverAsync (The Facade).

    Wraps ResolverAsync and executes methods via anyio.run. Each call runs on a
    fresh event loop, so the facade's own HTTP client keeps no idle connections.
    """

    def __init__(
        self,
        config: ResolverConfig | None = None,
        data_service: DataService | None = None,
        object_store: ObjectStore | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        """Initializes the Resolver facade.

        Args:
            config: Configuration for the resolver.
            data_service: Optional relational data service.
            object_store: Optional object store.
            client: Optional httpx.AsyncClient.
        """
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=None,
            limits=httpx.Limits(max_keepalive_connections=0),
        )
        self._async = ResolverAsync(config, data_service, object_store, self._client)

    def __enter__(self) -> "Resolver":
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.close()

    def close(self) -> None:
        """Closes the HTTP client if the facade created it."""
        if self._owns_client:
            anyio.run(self._client.aclose)

    def resolve(self, record_id: str) -> Report:
        """Resolves a record synchronously.

        Args:
            record_id: The opaque record identifier.

        Returns:
            Report: The outcome of the resolution.
        """
        return anyio.run(self._async.resolve, record_id)

    def inspect_table(self, table: str) -> TableColumns:
        """Lists the column names of a table synchronously."""
        return anyio.run(self._async.inspect_table, table)

    def inspect_record(self, record_id: str) -> RecordInspection:
        """Reads a record and its documents separately, synchronously."""
        return anyio.run(self._async.inspect_record, record_id)
