# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_resolver

"""
coreason-resolver
"""

__version__ = "0.1.0"
__author__ = "Gowtham A Rao"
__email__ = "gowtham.rao@coreason.ai"

from .config import ResolverConfig
from .data_service import DataService, PostgrestDataService
from .exceptions import DataServiceRequestError, ObjectStoreRequestError, OperationCancelled, ServiceError
from .factory import ResolverFactory
from .models import LinkedDocument, Outcome, Payload, Record, RecordInspection, Report, TableColumns
from .resolver import CancellationToken, Resolver, ResolverAsync
from .storage import ObjectStore, S3Storage, SupabaseStorage

__all__ = [
    "CancellationToken",
    "DataService",
    "DataServiceRequestError",
    "LinkedDocument",
    "ObjectStore",
    "ObjectStoreRequestError",
    "OperationCancelled",
    "Outcome",
    "Payload",
    "PostgrestDataService",
    "Record",
    "RecordInspection",
    "Report",
    "Resolver",
    "ResolverAsync",
    "ResolverConfig",
    "ResolverFactory",
    "S3Storage",
    "ServiceError",
    "SupabaseStorage",
    "TableColumns",
]
