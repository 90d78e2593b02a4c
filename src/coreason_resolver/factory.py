# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_resolver

import httpx

from coreason_resolver.config import ResolverConfig
from coreason_resolver.data_service import DataService, PostgrestDataService
from coreason_resolver.storage import ObjectStore, S3Storage, SupabaseStorage


class ResolverFactory:
    """
    Factory to create the resolver's collaborators based on configuration.
    """

    @staticmethod
    def get_data_service(config: ResolverConfig, client: httpx.AsyncClient) -> DataService:
        """
        Returns the PostgREST data service for the configured project.
        """
        url, key = config.require_supabase()
        return PostgrestDataService(
            client=client,
            base_url=url,
            api_key=key,
            records_table=config.records_table,
            documents_relation=config.documents_relation,
        )

    @staticmethod
    def get_object_store(config: ResolverConfig, client: httpx.AsyncClient) -> ObjectStore:
        """
        Returns an instance of the configured ObjectStore.
        """
        if config.storage_backend == "supabase":
            url, key = config.require_supabase()
            return SupabaseStorage(client=client, base_url=url, api_key=key, bucket=config.bucket)
        elif config.storage_backend == "s3":
            return S3Storage(
                bucket=config.bucket,
                region=config.s3_region,
                access_key=config.s3_access_key,
                secret_key=config.s3_secret_key,
                endpoint_url=config.s3_endpoint_url,
                timeout=config.request_timeout,
            )
        else:
            # Unreachable due to Pydantic validation.
            raise ValueError(f"Unknown storage backend: {config.storage_backend}")  # pragma: no cover
