from typing import Any, Generator
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from coreason_resolver.config import ResolverConfig
from coreason_resolver.models import LinkedDocument, Payload, Record

ANALYSIS_ID = "c725d8a1-57b0-49fc-9657-b953499fb841"


@pytest.fixture
def resolver_config() -> ResolverConfig:
    with patch.dict("os.environ", {}, clear=True):
        return ResolverConfig(
            supabase_url="https://project.supabase.co",
            service_role_key="service-role-key",
            enable_audit_logging=False,
            request_timeout=5.0,
        )


@pytest.fixture
def linked_record() -> Record:
    return Record(
        id=ANALYSIS_ID,
        status="completed",
        linked_documents=[
            LinkedDocument(filename="report.pdf", storage_path="1700000000-report.pdf", file_type="application/pdf")
        ],
    )


@pytest.fixture
def pdf_payload() -> Payload:
    return Payload(data=b"%PDF-1.7 fake", size=13, content_type="application/pdf")


@pytest.fixture
def mock_data_service(linked_record: Record) -> Any:
    mock = MagicMock()
    mock.fetch_record = AsyncMock(return_value=linked_record)
    mock.fetch_sample_row = AsyncMock(return_value={"id": ANALYSIS_ID, "status": "completed"})
    mock.fetch_rows = AsyncMock(return_value=[])
    return mock


@pytest.fixture
def mock_object_store(pdf_payload: Payload) -> Any:
    mock = MagicMock()
    mock.download = AsyncMock(return_value=pdf_payload)
    return mock


@pytest.fixture
def mock_boto3() -> Generator[Any, None, None]:
    with patch("coreason_resolver.storage.boto3") as mock:
        yield mock
