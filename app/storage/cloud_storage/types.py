from typing import Optional

import filetype

DEFAULT_MIME = "application/octet-stream"


def sniff_mime(data: bytes) -> Optional[str]:
    kind = filetype.guess(data)
    return kind.mime if kind else None


def resolve_content_type(declared: Optional[str], data: bytes) -> str:
    """Declared upload type when usable, else sniffed from the bytes."""
    ct = (declared or "").split(";")[0].strip().lower()
    if ct and ct != DEFAULT_MIME:
        return ct
    return sniff_mime(data) or DEFAULT_MIME
