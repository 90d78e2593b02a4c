# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_resolver

from typing import Any


class ServiceError(Exception):
    """Raised when a remote collaborator reports a failure.

    Attributes:
        message: The error message reported by the service.
        detail: The raw error body (or a synthesized one for transport failures).
    """

    def __init__(self, message: str, detail: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.detail = detail or {"message": message}


class DataServiceRequestError(ServiceError):
    """The relational data service rejected or failed a read."""


class ObjectStoreRequestError(ServiceError):
    """The object store rejected or failed a download."""


class OperationCancelled(Exception):
    """An outbound call was aborted through a CancellationToken."""
