"""
S3 implementation of IStorageSigner.

Presigns GetObject requests; nothing else is ever signed.
"""

import asyncio
import logging
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from storeguard.app.services.storage_signer import (
    MAX_SIGNED_URL_SECONDS,
    IStorageSigner,
    StorageSigningError,
)

logger = logging.getLogger(__name__)


class S3StorageSigner(IStorageSigner):
    def __init__(
        self,
        bucket: str,
        region: str,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
    ):
        if not bucket or not access_key_id or not secret_access_key:
            logger.warning("S3 storage is not fully configured; file downloads will fail")
        self.bucket = bucket
        self._client = boto3.client(
            "s3",
            region_name=region,
            aws_access_key_id=access_key_id or None,
            aws_secret_access_key=secret_access_key or None,
            config=Config(signature_version="s3v4"),
        )

    async def generate_signed_url(self, storage_key: str, expires_in: int) -> str:
        if not self.bucket:
            raise StorageSigningError("Storage bucket is not configured")

        expires_in = min(expires_in, MAX_SIGNED_URL_SECONDS)
        try:
            url = await asyncio.to_thread(
                self._client.generate_presigned_url,
                "get_object",
                Params={"Bucket": self.bucket, "Key": storage_key},
                ExpiresIn=expires_in,
            )
        except (BotoCoreError, ClientError) as exc:
            logger.error(f"Failed to sign download for {storage_key}: {exc}")
            raise StorageSigningError("Failed to generate download link") from exc

        logger.info(f"Signed download for {storage_key} (expires in {expires_in}s)")
        return url
