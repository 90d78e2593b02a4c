from typing import Any
from unittest.mock import AsyncMock

from coreason_resolver.config import ResolverConfig
from coreason_resolver.models import Outcome, TableColumns
from coreason_resolver.resolver import Resolver


def test_resolver_sync_resolve(resolver_config: ResolverConfig, mock_data_service: Any, mock_object_store: Any) -> None:
    with Resolver(resolver_config, mock_data_service, mock_object_store) as svc:
        report = svc.resolve("rec-1")

    assert report.outcome is Outcome.SUCCESS
    mock_data_service.fetch_record.assert_awaited_once_with("rec-1")
    mock_object_store.download.assert_awaited_once()


def test_resolver_sync_repeated_calls(
    resolver_config: ResolverConfig, mock_data_service: Any, mock_object_store: Any
) -> None:
    mock_data_service.fetch_record.return_value = None
    with Resolver(resolver_config, mock_data_service, mock_object_store) as svc:
        first = svc.resolve("rec-1")
        second = svc.resolve("rec-1")

    assert first.outcome is second.outcome is Outcome.NOT_FOUND
    assert mock_data_service.fetch_record.await_count == 2


def test_resolver_sync_inspect_table(
    resolver_config: ResolverConfig, mock_data_service: Any, mock_object_store: Any
) -> None:
    with Resolver(resolver_config, mock_data_service, mock_object_store) as svc:
        result = svc.inspect_table("analyses")

    assert result == TableColumns(table="analyses", columns=["id", "status"])


def test_resolver_sync_closes_own_client(resolver_config: ResolverConfig) -> None:
    svc = Resolver(resolver_config)
    svc.close()
    assert svc._client.is_closed


def test_resolver_sync_inspect_record(
    resolver_config: ResolverConfig, mock_data_service: Any, mock_object_store: Any
) -> None:
    mock_data_service.fetch_rows = AsyncMock(side_effect=[[{"id": "rec-1"}], []])
    with Resolver(resolver_config, mock_data_service, mock_object_store) as svc:
        inspection = svc.inspect_record("rec-1")

    assert inspection.record == {"id": "rec-1"}
    assert inspection.documents == []
