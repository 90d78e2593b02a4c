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
from urllib.parse import quote

import anyio
import boto3
import httpx
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from coreason_resolver.exceptions import ObjectStoreRequestError
from coreason_resolver.models import Payload
from coreason_resolver.utils.http import error_detail

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class ObjectStore(Protocol):
    """Protocol for object storage backends."""

    async def download(self, key: str) -> Payload:
        """Downloads the blob stored under a key.

        Args:
            key: The storage path of the object.

        Returns:
            Payload: The object content, size and content type.

        Raises:
            ObjectStoreRequestError: If the object cannot be fetched.
        """
        ...


class SupabaseStorage:
    """Supabase Storage implementation of the ObjectStore protocol."""

    def __init__(self, client: httpx.AsyncClient, base_url: str, api_key: str, bucket: str):
        """Initializes the SupabaseStorage backend.

        Args:
            client: The shared httpx.AsyncClient.
            base_url: The Supabase project URL.
            api_key: The service role key.
            bucket: The storage bucket name.
        """
        self.client = client
        self.bucket = bucket
        self.object_url = f"{base_url.rstrip('/')}/storage/v1/object/{quote(bucket, safe='')}"
        self._headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
        }

    async def download(self, key: str) -> Payload:
        url = f"{self.object_url}/{quote(key.lstrip('/'), safe='/')}"
        logger.info(f"Downloading {self.bucket}/{key}")

        try:
            response = await self.client.get(url, headers=self._headers)
        except httpx.HTTPError as e:
            logger.error(f"Storage request failed: {e}")
            raise ObjectStoreRequestError(str(e) or type(e).__name__, {"code": type(e).__name__}) from e

        if response.is_error:
            detail = error_detail(response)
            message = str(detail.get("message") or detail.get("error") or response.reason_phrase)
            raise ObjectStoreRequestError(message, detail)

        content = response.content
        content_type = response.headers.get("content-type", DEFAULT_CONTENT_TYPE)
        return Payload(data=content, size=len(content), content_type=content_type)


class S3Storage:
    """S3 implementation of the ObjectStore protocol."""

    def __init__(
        self,
        bucket: str,
        region: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
        endpoint_url: str | None = None,
        timeout: float | None = None,
    ):
        """Initializes the S3Storage backend.

        Args:
            bucket: The S3 bucket name.
            region: Optional AWS region name.
            access_key: Optional AWS access key ID.
            secret_key: Optional AWS secret access key.
            endpoint_url: Optional endpoint URL for S3-compatible services (e.g., MinIO).
            timeout: Optional connect and read timeout in seconds.
        """
        self.bucket = bucket
        self.client = boto3.client(
            "s3",
            region_name=region,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            endpoint_url=endpoint_url,
            config=Config(connect_timeout=timeout, read_timeout=timeout) if timeout else None,
        )

    async def download(self, key: str) -> Payload:
        logger.info(f"Downloading s3://{self.bucket}/{key}")

        def _get_object() -> Payload:
            response: dict[str, Any] = self.client.get_object(Bucket=self.bucket, Key=key)
            content: bytes = response["Body"].read()
            return Payload(
                data=content,
                size=len(content),
                content_type=response.get("ContentType") or DEFAULT_CONTENT_TYPE,
            )

        try:
            # The worker thread is abandoned on timeout or cancellation; boto3 cannot be interrupted.
            return await anyio.to_thread.run_sync(_get_object, abandon_on_cancel=True)
        except ClientError as e:
            error = e.response.get("Error", {})
            logger.error(f"Failed to download s3://{self.bucket}/{key}: {e}")
            raise ObjectStoreRequestError(
                str(error.get("Message") or e),
                {"code": error.get("Code"), "message": error.get("Message"), "key": key},
            ) from e
        except BotoCoreError as e:
            logger.error(f"S3 transport failure: {e}")
            raise ObjectStoreRequestError(str(e), {"code": type(e).__name__, "key": key}) from e
