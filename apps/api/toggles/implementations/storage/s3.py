"""
S3-compatible document store implementation.

Works with:
- AWS S3
- MinIO
- Any S3-compatible storage
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from toggles.core.errors import NotFoundError


class S3DocumentStore:
    """
    S3-backed document store.

    Each document is one object. Writes are single ``put_object`` calls, so
    a document is always replaced atomically; concurrent writers are not
    serialized.

    Usage:
        # AWS S3
        store = S3DocumentStore(bucket="feature-toggles", region="ap-south-1")

        # MinIO
        store = S3DocumentStore(
            bucket="feature-toggles",
            endpoint_url="http://localhost:9000",
            access_key="minioadmin",
            secret_key="minioadmin",
        )
    """

    CONTENT_TYPE = "application/json"
    CACHE_CONTROL = "no-cache, no-store, must-revalidate"

    def __init__(
        self,
        bucket: str,
        region: str = "ap-south-1",
        access_key: Optional[str] = None,
        secret_key: Optional[str] = None,
        endpoint_url: Optional[str] = None,
    ):
        """
        Initialize S3 document store.

        Args:
            bucket: S3 bucket name
            region: AWS region
            access_key: AWS access key ID (or MinIO access key)
            secret_key: AWS secret access key (or MinIO secret key)
            endpoint_url: Custom endpoint for MinIO/compatible services
        """
        self.bucket = bucket
        self.region = region

        # Import here to avoid requiring boto3 if not using S3
        try:
            import aioboto3
        except ImportError:
            raise ImportError(
                "aioboto3 is required for S3 storage. "
                "Install with: pip install aioboto3"
            )

        self._session = aioboto3.Session(
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            region_name=region,
        )
        self._endpoint_url = endpoint_url

    def _get_client_config(self) -> dict:
        """Get configuration for S3 client."""
        config = {}
        if self._endpoint_url:
            config["endpoint_url"] = self._endpoint_url
        return config

    async def get(self, key: str) -> bytes:
        """Download a document."""
        async with self._session.client("s3", **self._get_client_config()) as s3:
            try:
                response = await s3.get_object(Bucket=self.bucket, Key=key)
                async with response["Body"] as stream:
                    return await stream.read()
            except s3.exceptions.NoSuchKey:
                raise NotFoundError(f"Document not found: {key}", field="key", value=key)

    async def put(self, key: str, data: bytes) -> None:
        """Replace a document."""
        async with self._session.client("s3", **self._get_client_config()) as s3:
            await s3.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=self.CONTENT_TYPE,
                CacheControl=self.CACHE_CONTROL,
                Expires=datetime(1970, 1, 1, tzinfo=timezone.utc),
                Metadata={"last-modified": datetime.now(timezone.utc).isoformat()},
            )
