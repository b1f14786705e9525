from functools import lru_cache
from typing import Any, Optional
import boto3
from botocore.config import Config
from app.core.settings import settings

def _client():
    return boto3.client(
        "s3",
        endpoint_url=settings.R2_S3_ENDPOINT,
        aws_access_key_id=settings.R2_ACCESS_KEY_ID.get_secret_value(),
        aws_secret_access_key=settings.R2_SECRET_ACCESS_KEY.get_secret_value(),
        region_name="auto",
        config=Config(
            signature_version="s3v4",
            s3={"addressing_style": "path"},
            # sin reintentos: cada fallo es terminal para la petición
            retries={"max_attempts": 1, "mode": "standard"},
            connect_timeout=5,
            read_timeout=15,
        ),
    )

@lru_cache(maxsize=1)
def r2_client():
    return _client()

BUCKET = settings.R2_BUCKET
PREFIX = settings.R2_PREFIX

def build_key(*parts: str, prefix: Optional[str] = None) -> str:
    head = PREFIX if prefix is None else prefix
    segs = [p.strip("/") for p in parts if p]
    return "/".join([p for p in ([head] + segs) if p])

def public_url(key: str, base: Optional[str] = None) -> str:
    base = (base if base is not None else settings.MEDIA_PUBLIC_BASE).rstrip("/")
    if not base:
        raise RuntimeError("MEDIA_PUBLIC_BASE no definida")
    return f"{base}/{key.lstrip('/')}"

def put_object_bytes(
    key: str,
    body: bytes,
    *,
    content_type: str,
    cache_control: str | None = None,
    client: Any = None,
    bucket: Optional[str] = None,
):
    (client or r2_client()).put_object(
        Bucket=bucket or BUCKET,
        Key=key,
        Body=body,
        ContentType=content_type,
        **({"CacheControl": cache_control} if cache_control else {}),
    )
