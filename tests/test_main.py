# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_resolver

from typing import Generator
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from mcp.types import TextContent

from coreason_resolver import main as main_module
from coreason_resolver.main import inspect_record, inspect_table, main, resolve_record
from coreason_resolver.models import Outcome, Record, RecordInspection, Report, TableColumns


@pytest.fixture
def mock_resolver() -> Generator[MagicMock, None, None]:
    resolver = MagicMock()
    resolver.resolve = AsyncMock()
    resolver.inspect_table = AsyncMock()
    resolver.inspect_record = AsyncMock()
    with patch("coreason_resolver.main.get_resolver", return_value=resolver):
        yield resolver


@pytest.mark.asyncio
async def test_resolve_record_success(mock_resolver: MagicMock) -> None:
    mock_resolver.resolve.return_value = Report(
        outcome=Outcome.SUCCESS,
        record_id="rec-1",
        record=Record(id="rec-1", status="completed"),
        storage_path="1-a.pdf",
        size=2048,
        content_type="application/pdf",
    )

    result = await resolve_record("rec-1")

    assert all(isinstance(item, TextContent) for item in result)
    assert [item.text for item in result] == [
        "Outcome: Success",
        "Record: rec-1 (status: completed)",
        "Storage Path: 1-a.pdf",
        "Size: 2048 bytes",
        "Type: application/pdf",
    ]


@pytest.mark.asyncio
async def test_resolve_record_storage_error(mock_resolver: MagicMock) -> None:
    mock_resolver.resolve.return_value = Report(
        outcome=Outcome.STORAGE_FETCH_ERROR,
        record_id="rec-1",
        record=Record(id="rec-1", status="completed"),
        storage_path="1-a.pdf",
        message="Object not found",
        detail={"error": "not_found"},
    )

    result = await resolve_record("rec-1")

    assert [item.text for item in result] == [
        "Outcome: StorageFetchError",
        "Record: rec-1 (status: completed)",
        "Storage Path: 1-a.pdf",
        "Message: Object not found",
        "Detail: {'error': 'not_found'}",
    ]


@pytest.mark.asyncio
async def test_resolve_record_not_found(mock_resolver: MagicMock) -> None:
    mock_resolver.resolve.return_value = Report(
        outcome=Outcome.NOT_FOUND, record_id="rec-1", message="Record not found."
    )

    result = await resolve_record("rec-1")

    assert [item.text for item in result] == ["Outcome: NotFound", "Message: Record not found."]


@pytest.mark.asyncio
async def test_resolve_record_invalid_id(mock_resolver: MagicMock) -> None:
    mock_resolver.resolve.side_effect = ValueError("record_id must be a non-empty string")

    result = await resolve_record("")

    assert result[0].text == "Error resolving record: record_id must be a non-empty string"


@pytest.mark.asyncio
async def test_inspect_table_columns(mock_resolver: MagicMock) -> None:
    mock_resolver.inspect_table.return_value = TableColumns(table="users", columns=["id", "email"])
    assert await inspect_table("users") == ["id", "email"]


@pytest.mark.asyncio
async def test_inspect_table_empty(mock_resolver: MagicMock) -> None:
    mock_resolver.inspect_table.return_value = TableColumns(table="users")
    assert await inspect_table("users") == ["No rows found in users to inspect."]


@pytest.mark.asyncio
async def test_inspect_table_error(mock_resolver: MagicMock) -> None:
    mock_resolver.inspect_table.return_value = TableColumns(
        table="nope", error={"code": "42P01", "message": "relation does not exist"}
    )
    assert await inspect_table("nope") == ["Error fetching nope: relation does not exist"]


def test_get_resolver_is_lazy_and_cached() -> None:
    with (
        patch.object(main_module, "_resolver", None),
        patch("coreason_resolver.main.ResolverAsync") as MockResolver,
    ):
        first = main_module.get_resolver()
        second = main_module.get_resolver()

        MockResolver.assert_called_once_with()
        assert first is second is MockResolver.return_value


def test_main_runs_server() -> None:
    with patch("coreason_resolver.main.mcp") as mock_mcp:
        main()
        mock_mcp.run.assert_called_once()


@pytest.mark.asyncio
async def test_inspect_record_rows(mock_resolver: MagicMock) -> None:
    mock_resolver.inspect_record.return_value = RecordInspection(
        record_id="rec-1",
        record={"id": "rec-1", "status": "pending"},
        documents=[{"id": 3, "storage_path": "1-a.pdf"}],
    )

    assert await inspect_record("rec-1") == [
        "Record: {'id': 'rec-1', 'status': 'pending'}",
        "Documents: 1",
        "{'id': 3, 'storage_path': '1-a.pdf'}",
    ]


@pytest.mark.asyncio
async def test_inspect_record_errors(mock_resolver: MagicMock) -> None:
    mock_resolver.inspect_record.return_value = RecordInspection(
        record_id="rec-1", documents_error={"code": "42P01"}
    )

    assert await inspect_record("rec-1") == ["Record: None", "Documents: {'code': '42P01'}"]
