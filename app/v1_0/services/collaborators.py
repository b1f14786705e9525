from typing import Any, Dict, Optional, Protocol, runtime_checkable

from app.v1_0.entities import IdentityUser


class IdentityNotFound(LookupError):
    """Raised by an identity provider when no user holds the requested phone."""

    def __init__(self, phone: str) -> None:
        self.phone = phone
        super().__init__(f"identity_not_found:{phone}")


# --- colaboradores externos del flujo de proveedores ---
@runtime_checkable
class IdentityProvider(Protocol):
    async def create_user(
        self, *, phone: str, display_name: str, email: Optional[str] = None
    ) -> IdentityUser: ...

    async def update_user(self, uid: str, *, phone: str) -> IdentityUser: ...

    async def delete_user(self, uid: str) -> None: ...

    async def get_user_by_phone(self, phone: str) -> IdentityUser: ...


@runtime_checkable
class BlobStore(Protocol):
    async def save(self, path: str, data: bytes, *, content_type: str) -> str: ...


@runtime_checkable
class DocumentStore(Protocol):
    async def get(self, uid: str) -> Optional[Dict[str, Any]]: ...

    async def set(self, uid: str, data: Dict[str, Any]) -> None: ...

    async def update(self, uid: str, data: Dict[str, Any]) -> None: ...

    async def delete(self, uid: str) -> None: ...
