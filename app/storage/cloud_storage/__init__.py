from .service import CloudStorageService, CACHE_CONTROL

from .types import (
    DEFAULT_MIME,
    sniff_mime,
    resolve_content_type,
)

from .r2_client import (
    r2_client,
    BUCKET,
    PREFIX,
    build_key,
    public_url,
    put_object_bytes,
)

__all__ = [
    "CloudStorageService", "CACHE_CONTROL",
    "DEFAULT_MIME", "sniff_mime", "resolve_content_type",
    "r2_client", "BUCKET", "PREFIX",
    "build_key", "public_url", "put_object_bytes",
]
