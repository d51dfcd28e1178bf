"""
Object storage staging area for payloads routed through long-running jobs
"""
import asyncio
import logging
import uuid
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import storage

from interview_analysis.core.exceptions import BackendError, BackendErrorCode, ConfigurationError

logger = logging.getLogger(__name__)


class ObjectStorage(ABC):
    """Contract for the staging store"""

    @abstractmethod
    async def upload(self, data: bytes, path: str, content_type: str) -> str:
        """Store bytes at path and return a URI the remote services can read."""
        pass

    @abstractmethod
    async def delete(self, path: str) -> None:
        pass

    def is_ready(self) -> bool:
        return True

    def get_status(self) -> Dict[str, Any]:
        return {"configured": self.is_ready()}


def staging_path(prefix: str, extension: str) -> str:
    """Unique object path for one staged payload"""
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S")
    return f"{prefix}/{timestamp}-{uuid.uuid4().hex[:8]}.{extension}"


def extension_for(mime_type: Optional[str]) -> str:
    if not mime_type or "/" not in mime_type:
        return "bin"
    subtype = mime_type.split(";")[0].split("/")[1].strip().lower()
    return {"x-wav": "wav", "wave": "wav", "mpeg": "mp3", "x-flac": "flac"}.get(subtype, subtype)


async def delete_quietly(store: ObjectStorage, path: str):
    """Best-effort cleanup: a failed delete is logged, never raised"""
    try:
        await store.delete(path)
        logger.info(f"🗑️ Temporary file deleted: {path}")
    except Exception as e:
        logger.warning(f"⚠️ Failed to delete temporary file {path}: {e}")


class GCSObjectStorage(ObjectStorage):
    """Google Cloud Storage bucket used as the staging area"""

    def __init__(self, bucket_name: str, project_id: str = "", client=None,
                 executor: Optional[ThreadPoolExecutor] = None):
        if client is None:
            try:
                client = storage.Client(project=project_id or None)
            except auth_exceptions.DefaultCredentialsError as e:
                raise ConfigurationError(f"Cloud Storage credentials not found: {e}") from e
        self.client = client
        self.bucket_name = bucket_name
        self.bucket = client.bucket(bucket_name)
        self.executor = executor or ThreadPoolExecutor(max_workers=2, thread_name_prefix="gcs")
        logger.info(f"📦 Cloud Storage bucket: {bucket_name}")

    async def _run(self, func):
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(self.executor, func)
        except google_exceptions.GoogleAPIError as e:
            raise BackendError(BackendErrorCode.UNAVAILABLE, str(e), "gcs") from e

    async def upload(self, data: bytes, path: str, content_type: str) -> str:
        blob = self.bucket.blob(path)
        logger.info(f"☁️ Uploading {len(data) / (1024 * 1024):.2f}MB to Cloud Storage: {path}")
        await self._run(lambda: blob.upload_from_string(data, content_type=content_type))
        gcs_uri = f"gs://{self.bucket_name}/{path}"
        logger.info(f"✅ Upload complete: {gcs_uri}")
        return gcs_uri

    async def delete(self, path: str) -> None:
        blob = self.bucket.blob(path)
        await self._run(blob.delete)

    def get_status(self) -> Dict[str, Any]:
        return {"configured": self.is_ready(), "bucket": self.bucket_name}
