from typing import Any, Optional

from starlette.concurrency import run_in_threadpool

from app.core.logger import logger
from .r2_client import BUCKET, PREFIX, build_key, public_url, put_object_bytes, r2_client

CACHE_CONTROL = "public, max-age=31536000, immutable"


class CloudStorageService:
    """Blob store over the R2 bucket. Objects are public through MEDIA_PUBLIC_BASE."""

    def __init__(
        self,
        client: Any = None,
        bucket: Optional[str] = None,
        prefix: Optional[str] = None,
        public_base: Optional[str] = None,
    ) -> None:
        self._client = client
        self._bucket = bucket or BUCKET
        self._prefix = PREFIX if prefix is None else prefix
        self._public_base = public_base

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = r2_client()
        return self._client

    def key_for(self, path: str) -> str:
        return build_key(path, prefix=self._prefix)

    def view_url(self, key: str) -> str:
        return public_url(key, base=self._public_base)

    async def save(self, path: str, data: bytes, *, content_type: str) -> str:
        """
        Store ``data`` under ``path`` (namespaced by the bucket prefix).

        Args:
            path: Logical path, e.g. ``logos/<uid>/<ts>_<name>``.
            data: File bytes.
            content_type: MIME type stored with the object.

        Returns:
            Public URL of the exact key written.
        """
        key = self.key_for(path)
        await run_in_threadpool(
            put_object_bytes,
            key,
            data,
            content_type=content_type,
            cache_control=CACHE_CONTROL,
            client=self.client,
            bucket=self._bucket,
        )
        url = self.view_url(key)
        logger.info(
            "[CloudStorageService] stored key=%s bytes=%s ct=%s",
            key,
            len(data),
            content_type,
        )
        return url
