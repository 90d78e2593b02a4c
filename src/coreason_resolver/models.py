# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_resolver

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class LinkedDocument(BaseModel):
    """Metadata of an uploaded file linked to a record.

    Attributes:
        filename: The human-readable name of the uploaded file.
        storage_path: The object store key holding the file content.
        file_type: The file-type tag recorded at upload time.
    """

    filename: str | None = None
    storage_path: str | None = None
    file_type: str | None = None


class Record(BaseModel):
    """A tracked record and its first-level linked documents.

    Attributes:
        id: The opaque record identifier.
        status: The lifecycle state reported by the data service.
        linked_documents: Linked documents in the order the service returned them.
    """

    id: str
    status: str | None = None
    linked_documents: list[LinkedDocument] = Field(default_factory=list)

    def first_document(self) -> LinkedDocument | None:
        """Returns the first linked document in service order, if any."""
        if not self.linked_documents:
            return None
        return self.linked_documents[0]


class Payload(BaseModel):
    """Binary content fetched from the object store."""

    data: bytes
    size: int
    content_type: str = "application/octet-stream"


class Outcome(str, Enum):
    SUCCESS = "Success"
    DATA_SERVICE_ERROR = "DataServiceError"
    NOT_FOUND = "NotFound"
    MISSING_LINKAGE = "MissingLinkage"
    STORAGE_FETCH_ERROR = "StorageFetchError"


class Report(BaseModel):
    """Outcome of a single resolution attempt.

    Only payload metadata is kept; the bytes are dropped once measured.

    Attributes:
        outcome: The closed outcome tag.
        record_id: The identifier that was resolved.
        record: The record as fetched, when the data service returned one.
        storage_path: The storage path that was (or would have been) fetched.
        size: Payload size in bytes on success.
        content_type: Payload content type on success.
        message: A human-readable summary of the outcome.
        detail: The underlying error detail for failed outcomes.
    """

    outcome: Outcome
    record_id: str
    record: Record | None = None
    storage_path: str | None = None
    size: int | None = None
    content_type: str | None = None
    message: str = ""
    detail: dict[str, Any] | None = None

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.SUCCESS


class TableColumns(BaseModel):
    """Column names observed on a sample row of a table."""

    table: str
    columns: list[str] = Field(default_factory=list)
    error: dict[str, Any] | None = None


class RecordInspection(BaseModel):
    """Raw record row and linked document rows, read without the join.

    Attributes:
        record_id: The identifier that was inspected.
        record: The record row, or None if absent or unreadable.
        documents: Rows of the documents table pointing at the record.
        record_error: Error detail of the record read, if it failed.
        documents_error: Error detail of the documents read, if it failed.
    """

    record_id: str
    record: dict[str, Any] | None = None
    documents: list[dict[str, Any]] = Field(default_factory=list)
    record_error: dict[str, Any] | None = None
    documents_error: dict[str, Any] | None = None
