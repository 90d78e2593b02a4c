# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_resolver

from typing import Any, Protocol

import httpx
from loguru import logger
from pydantic import ValidationError

from coreason_resolver.exceptions import DataServiceRequestError
from coreason_resolver.models import LinkedDocument, Record
from coreason_resolver.utils.http import error_detail

DOCUMENT_COLUMNS = "filename,storage_path,file_type"


class DataService(Protocol):
    """Protocol for the relational data service."""

    async def fetch_record(self, record_id: str) -> Record | None:
        """Fetches a record and its linked documents in one joined read.

        Args:
            record_id: The opaque record identifier.

        Returns:
            Record | None: The record, or None if no row matches.

        Raises:
            DataServiceRequestError: If the service reports an error.
        """
        ...

    async def fetch_sample_row(self, table: str) -> dict[str, Any] | None:
        """Fetches a single arbitrary row of a table, or None if it is empty."""
        ...

    async def fetch_rows(self, table: str, column: str, value: str) -> list[dict[str, Any]]:
        """Fetches every row of a table whose column equals a value."""
        ...


class PostgrestDataService:
    """PostgREST implementation of the DataService protocol (Supabase ``/rest/v1``)."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str,
        api_key: str,
        records_table: str = "analyses",
        documents_relation: str = "uploaded_documents",
    ):
        """Initializes the PostgrestDataService.

        Args:
            client: The shared httpx.AsyncClient.
            base_url: The Supabase project URL.
            api_key: The service role key, sent as both apikey and bearer token.
            records_table: The table holding records.
            documents_relation: The one-to-many relation holding linked documents.
        """
        self.client = client
        self.rest_url = f"{base_url.rstrip('/')}/rest/v1"
        self.records_table = records_table
        self.documents_relation = documents_relation
        self._headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
        }

    async def fetch_record(self, record_id: str) -> Record | None:
        params = {
            "select": f"id,status,{self.documents_relation}({DOCUMENT_COLUMNS})",
            "id": f"eq.{record_id}",
        }
        rows = await self._get(self.records_table, params)

        if not rows:
            return None
        if len(rows) > 1:
            raise DataServiceRequestError(
                f"Expected one row for id {record_id}, got {len(rows)}",
                {"code": "multiple_rows", "rows": len(rows)},
            )

        row = rows[0]
        try:
            documents = [LinkedDocument.model_validate(doc) for doc in row.get(self.documents_relation) or []]
            return Record(id=str(row["id"]), status=row.get("status"), linked_documents=documents)
        except (KeyError, ValidationError) as e:
            raise DataServiceRequestError(
                f"Unexpected record shape: {e}", {"code": "invalid_shape", "message": str(e)}
            ) from e

    async def fetch_sample_row(self, table: str) -> dict[str, Any] | None:
        rows = await self._get(table, {"select": "*", "limit": "1"})
        return rows[0] if rows else None

    async def fetch_rows(self, table: str, column: str, value: str) -> list[dict[str, Any]]:
        return await self._get(table, {"select": "*", column: f"eq.{value}"})

    async def _get(self, table: str, params: dict[str, str]) -> list[dict[str, Any]]:
        url = f"{self.rest_url}/{table}"
        logger.debug(f"GET {url} {params}")

        try:
            response = await self.client.get(url, params=params, headers=self._headers)
        except httpx.HTTPError as e:
            logger.error(f"Data service request failed: {e}")
            raise DataServiceRequestError(str(e) or type(e).__name__, {"code": type(e).__name__}) from e

        if response.is_error:
            detail = error_detail(response)
            message = str(detail.get("message") or response.reason_phrase)
            raise DataServiceRequestError(message, detail)

        try:
            body = response.json()
        except ValueError as e:
            logger.error(f"Data service returned a non-JSON body from {url}")
            raise DataServiceRequestError(
                "Expected a JSON array",
                {"code": "invalid_shape", "status": response.status_code, "message": response.text[:200] or None},
            ) from e

        if not isinstance(body, list) or not all(isinstance(row, dict) for row in body):
            raise DataServiceRequestError(
                "Expected a JSON array of objects", {"code": "invalid_shape", "status": response.status_code}
            )
        return body
