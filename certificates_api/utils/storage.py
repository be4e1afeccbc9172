"""
Object storage for certificate images.

The store is built once at startup (see ``main.lifespan``) and shared by all
requests. Google Cloud Storage calls are blocking, so each one runs in a
worker thread.
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from google.api_core import exceptions as gcs_exceptions
from google.cloud import storage
from google.oauth2 import service_account

from certificates_api.core.config import Settings

logger = logging.getLogger(__name__)


class BlobStoreError(Exception):
    """The object store rejected an upload or download."""


@dataclass
class StoredBlob:
    data: bytes
    content_type: Optional[str] = None


class BlobStore(Protocol):
    async def upload(self, path: str, data: bytes, content_type: str) -> None:
        """Write ``data`` at ``path``, replacing any existing object."""
        ...

    async def download(self, path: str) -> Optional[StoredBlob]:
        """Return the object at ``path``, or None if there is none."""
        ...

    async def remove(self, path: str) -> bool:
        """Best-effort delete. Never raises; returns False on failure."""
        ...

    def public_url(self, path: str) -> str:
        ...


class GCSBlobStore:
    def __init__(self, bucket: storage.Bucket, public_base_url: str):
        self.bucket = bucket
        self.public_base_url = public_base_url.rstrip("/")

    @classmethod
    def from_settings(cls, settings: Settings) -> "GCSBlobStore":
        try:
            if settings.GCS_CREDENTIALS_JSON:
                credentials = service_account.Credentials.from_service_account_info(
                    json.loads(settings.GCS_CREDENTIALS_JSON)
                )
                client = storage.Client(credentials=credentials, project=settings.GCS_PROJECT_ID)
            else:
                # Application default credentials
                client = storage.Client(project=settings.GCS_PROJECT_ID)
            bucket = client.bucket(settings.GCS_BUCKET_NAME)
        except Exception as e:
            logger.error(f"Failed to initialize GCS client: {str(e)}")
            raise RuntimeError("Could not initialize cloud storage") from e

        return cls(bucket, settings.GCS_PUBLIC_BASE_URL)

    async def upload(self, path: str, data: bytes, content_type: str) -> None:
        blob = self.bucket.blob(path)
        try:
            await asyncio.to_thread(blob.upload_from_string, data, content_type=content_type)
        except gcs_exceptions.GoogleAPIError as e:
            raise BlobStoreError(f"Upload of {path} failed: {e}") from e

    async def download(self, path: str) -> Optional[StoredBlob]:
        try:
            blob = await asyncio.to_thread(self.bucket.get_blob, path)
            if blob is None:
                return None
            data = await asyncio.to_thread(blob.download_as_bytes)
        except gcs_exceptions.NotFound:
            return None
        except gcs_exceptions.GoogleAPIError as e:
            raise BlobStoreError(f"Download of {path} failed: {e}") from e
        return StoredBlob(data=data, content_type=blob.content_type)

    async def remove(self, path: str) -> bool:
        try:
            await asyncio.to_thread(self.bucket.blob(path).delete)
        except gcs_exceptions.NotFound:
            logger.warning(f"File not found: {path}")
            return False
        except Exception as e:
            logger.error(f"Deletion failed: {str(e)}")
            return False
        logger.info(f"Deleted: {path}")
        return True

    def public_url(self, path: str) -> str:
        return f"{self.public_base_url}/{path}"
