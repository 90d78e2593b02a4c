# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_resolver

import re
from pathlib import Path
from typing import Any, Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from coreason_resolver.integrations.secrets import SecretsIntegrator

_NON_JWT_CHARS = re.compile(r"[^a-zA-Z0-9\-_.]")


class SecretsSettingsSource(PydanticBaseSettingsSource):
    """
    Custom Pydantic Settings Source that reads service credentials from the
    unprefixed process environment (``SUPABASE_URL``, ``SUPABASE_SERVICE_ROLE_KEY``, ...)
    and from the configured dotenv file.
    """

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        # Unused because __call__ returns the full mapping, but required by the ABC.
        return None, field_name, False  # pragma: no cover

    def __call__(self) -> dict[str, Any]:
        env_file = self.config.get("env_file")
        integrator = SecretsIntegrator(env_file if isinstance(env_file, (str, Path)) else None)
        secrets: dict[str, Any] = {}

        mapping = {
            "supabase_url": "SUPABASE_URL",
            "service_role_key": "SUPABASE_SERVICE_ROLE_KEY",
            "s3_access_key": "S3_ACCESS_KEY",
            "s3_secret_key": "S3_SECRET_KEY",
        }

        for field, key in mapping.items():
            val = integrator.get_secret(key)
            if val:
                secrets[field] = val

        return secrets


class ResolverConfig(BaseSettings):
    """
    Configuration for the resource resolver.
    """

    # Supabase project
    supabase_url: str | None = None
    service_role_key: str | None = None

    # Relational layout
    records_table: str = "analyses"
    documents_relation: str = "uploaded_documents"
    documents_foreign_key: str = "analysis_id"

    # Object store
    storage_backend: Literal["supabase", "s3"] = "supabase"
    bucket: str = "audit-uploads"
    s3_region: str | None = None
    s3_access_key: str | None = None
    s3_secret_key: str | None = None
    s3_endpoint_url: str | None = None

    request_timeout: float = 30.0
    enable_audit_logging: bool = True

    model_config = SettingsConfigDict(
        env_prefix="COREASON_RESOLVER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("supabase_url")
    @classmethod
    def _strip_url(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip().rstrip("/") or None

    @field_validator("service_role_key")
    @classmethod
    def _sanitize_key(cls, value: str | None) -> str | None:
        # Keep JWT characters only.
        if value is None:
            return None
        return _NON_JWT_CHARS.sub("", value) or None

    @field_validator("request_timeout")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("request_timeout must be positive")
        return value

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            SecretsSettingsSource(settings_cls),
            file_secret_settings,
        )

    def require_supabase(self) -> tuple[str, str]:
        """Returns the project URL and service key.

        Raises:
            ValueError: If either value is missing.
        """
        if not self.supabase_url or not self.service_role_key:
            raise ValueError("Missing Supabase configuration (SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY).")
        return self.supabase_url, self.service_role_key
