from typing import Any, Dict, List, Optional, cast

import httpx

from app.core.logger import logger
from app.core.settings import settings
from app.v1_0.entities import IdentityUser
from app.v1_0.services.collaborators import IdentityNotFound


def _phone_key(phone: Optional[str]) -> str:
    # GoTrue guarda el teléfono sin '+'
    return (phone or "").strip().lstrip("+")


class SupabaseAdminService:
    """Identity provider backed by the Supabase Auth admin REST endpoints."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
        page_size: Optional[int] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base = (base_url or settings.SUPABASE_URL).rstrip("/")
        self.headers = headers if headers is not None else settings.SUPABASE_ADMIN_HEADERS
        self.page_size = page_size or settings.IDENTITY_PAGE_SIZE
        self.timeout = timeout or settings.IDENTITY_TIMEOUT_SEC
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    @staticmethod
    def _normalize_user(u: Dict[str, Any]) -> IdentityUser:
        """
        Normalize a Supabase user payload into an IdentityUser.

        Raises:
            RuntimeError: If the id is missing or malformed.
        """
        uid = u.get("id")
        if not isinstance(uid, str) or not uid:
            raise RuntimeError("supabase_admin_user_shape_invalid")
        meta = cast(Dict[str, Any], u.get("user_metadata") or {})
        phone = u.get("phone") or None
        return IdentityUser(
            uid=uid,
            phone=f"+{_phone_key(phone)}" if phone else None,
            email=u.get("email") or None,
            display_name=meta.get("name") or meta.get("full_name"),
        )

    @staticmethod
    def _unwrap_user(data: Any, op: str) -> Dict[str, Any]:
        user = (data.get("user") or data) if isinstance(data, dict) else None
        if not isinstance(user, dict):
            raise RuntimeError(f"supabase_admin_{op}_unexpected_payload: " + str(data)[:600])
        return cast(Dict[str, Any], user)

    @staticmethod
    def _extract_users(payload: Any) -> List[Dict[str, Any]]:
        if isinstance(payload, list):
            src = payload
        elif isinstance(payload, dict):
            if isinstance(payload.get("users"), list):
                src = payload["users"]
            elif isinstance(payload.get("items"), list):
                src = payload["items"]
            else:
                raise RuntimeError("supabase_admin_unexpected_payload: " + str(payload)[:600])
        else:
            raise RuntimeError(f"supabase_admin_unexpected_type: {type(payload).__name__}")

        if any(not isinstance(x, dict) for x in src):
            raise RuntimeError("supabase_admin_unexpected_item_type: " + str(src[:3])[:600])
        return cast(List[Dict[str, Any]], src)

    async def create_user(
        self,
        *,
        phone: str,
        display_name: str,
        email: Optional[str] = None,
    ) -> IdentityUser:
        """
        Create a phone identity through the Supabase Admin API.

        Args:
            phone: Phone number, with or without leading '+'.
            display_name: Stored as ``name``/``full_name`` user metadata.
            email: Optional email, confirmed on creation.

        Returns:
            The created IdentityUser.

        Raises:
            RuntimeError: On non-2xx responses (e.g. phone already registered).
        """
        payload: Dict[str, Any] = {
            "phone": phone,
            "phone_confirm": True,
            "user_metadata": {"name": display_name, "full_name": display_name},
        }
        if email:
            payload["email"] = email
            payload["email_confirm"] = True

        async with self._client() as client:
            r = await client.post(f"{self.base}/auth/v1/admin/users", headers=self.headers, json=payload)
        if r.status_code >= 300:
            raise RuntimeError(f"supabase_admin_create_failed[{r.status_code}]: {r.text}")
        user = self._normalize_user(self._unwrap_user(r.json(), "create"))
        logger.info("[SupabaseAdminService] identity created uid=%s", user.uid)
        return user

    async def update_user(self, uid: str, *, phone: str) -> IdentityUser:
        """
        Replace the phone number of an identity.

        Raises:
            RuntimeError: On invalid id or API failure.
        """
        if not uid:
            raise RuntimeError("supabase_admin_update_invalid_id")

        async with self._client() as client:
            r = await client.put(
                f"{self.base}/auth/v1/admin/users/{uid}",
                headers=self.headers,
                json={"phone": phone, "phone_confirm": True},
            )
        if r.status_code >= 300:
            raise RuntimeError(f"supabase_admin_update_failed[{r.status_code}]: {r.text}")
        return self._normalize_user(self._unwrap_user(r.json(), "update"))

    async def delete_user(self, uid: str) -> None:
        """
        Delete an identity by id.

        Raises:
            RuntimeError: If the id is invalid or the API call fails.
        """
        if not isinstance(uid, str) or not uid:
            raise RuntimeError("supabase_admin_delete_invalid_id")

        async with self._client() as client:
            r = await client.delete(f"{self.base}/auth/v1/admin/users/{uid}", headers=self.headers)
        if r.status_code >= 300:
            raise RuntimeError(f"supabase_admin_delete_failed[{r.status_code}]: {r.text}")
        logger.info("[SupabaseAdminService] identity deleted uid=%s", uid)

    async def get_user_by_phone(self, phone: str) -> IdentityUser:
        """
        Find the identity holding ``phone``.

        The admin API has no phone filter, so users are paged through until a
        match is found or a short page marks the end of the listing.

        Raises:
            IdentityNotFound: If no identity holds the phone.
            RuntimeError: On API failure or unexpected payload shapes.
        """
        wanted = _phone_key(phone)
        if not wanted:
            raise IdentityNotFound(phone)

        page = 1
        async with self._client() as client:
            while True:
                r = await client.get(
                    f"{self.base}/auth/v1/admin/users",
                    headers=self.headers,
                    params={"page": page, "per_page": self.page_size},
                )
                if r.status_code >= 300:
                    raise RuntimeError(f"supabase_admin_list_users_failed[{r.status_code}]: {r.text}")

                users = self._extract_users(r.json())
                for u in users:
                    if _phone_key(u.get("phone")) == wanted:
                        return self._normalize_user(u)

                if len(users) < self.page_size:
                    break
                page += 1

        raise IdentityNotFound(phone)
