"""
Supabase Auth admin client against httpx.MockTransport
"""

import json

import httpx
import pytest

from app.v1_0.services import IdentityNotFound, SupabaseAdminService

BASE = "https://supabase.test"


def _service(handler, page_size: int = 2) -> SupabaseAdminService:
    return SupabaseAdminService(
        base_url=BASE,
        headers={"apikey": "k", "Authorization": "Bearer k"},
        page_size=page_size,
        timeout=5,
        transport=httpx.MockTransport(handler),
    )


def _user(uid: str, phone: str, name: str = "Ali") -> dict:
    return {"id": uid, "phone": phone, "email": None, "user_metadata": {"name": name}}


@pytest.mark.asyncio
async def test_create_user_posts_phone_and_metadata():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["path"] = request.url.path
        seen["apikey"] = request.headers.get("apikey")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_user("u1", "966500000000"))

    user = await _service(handler).create_user(phone="+966500000000", display_name="Ali")

    assert seen["method"] == "POST"
    assert seen["path"] == "/auth/v1/admin/users"
    assert seen["apikey"] == "k"
    assert seen["body"]["phone"] == "+966500000000"
    assert seen["body"]["phone_confirm"] is True
    assert seen["body"]["user_metadata"]["name"] == "Ali"
    assert "email" not in seen["body"]
    assert user.uid == "u1"
    assert user.phone == "+966500000000"
    assert user.display_name == "Ali"


@pytest.mark.asyncio
async def test_create_user_with_email():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, json={"user": _user("u2", "966511111111")})

    user = await _service(handler).create_user(
        phone="+966511111111", display_name="Sara", email="sara@x.com"
    )

    assert seen["body"]["email"] == "sara@x.com"
    assert seen["body"]["email_confirm"] is True
    assert user.uid == "u2"


@pytest.mark.asyncio
async def test_create_user_rejected():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(422, json={"msg": "Phone number already registered"})

    with pytest.raises(RuntimeError) as exc:
        await _service(handler).create_user(phone="+966500000000", display_name="Ali")
    assert "supabase_admin_create_failed[422]" in str(exc.value)


@pytest.mark.asyncio
async def test_update_user_puts_phone():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_user("u1", "966522222222"))

    user = await _service(handler).update_user("u1", phone="+966522222222")

    assert seen["method"] == "PUT"
    assert seen["path"] == "/auth/v1/admin/users/u1"
    assert seen["body"] == {"phone": "+966522222222", "phone_confirm": True}
    assert user.phone == "+966522222222"


@pytest.mark.asyncio
async def test_delete_user():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["path"] = request.url.path
        return httpx.Response(200, json={})

    await _service(handler).delete_user("u1")

    assert seen == {"method": "DELETE", "path": "/auth/v1/admin/users/u1"}


@pytest.mark.asyncio
async def test_delete_user_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"msg": "User not found"})

    with pytest.raises(RuntimeError) as exc:
        await _service(handler).delete_user("u1")
    assert "supabase_admin_delete_failed[404]" in str(exc.value)


@pytest.mark.asyncio
async def test_get_user_by_phone_pages_until_match():
    pages = {
        "1": [_user("a", "966500000001"), _user("b", "966500000002")],
        "2": [_user("c", "966500000003")],
    }
    requested = []

    def handler(request: httpx.Request) -> httpx.Response:
        page = request.url.params["page"]
        requested.append((page, request.url.params["per_page"]))
        return httpx.Response(200, json={"users": pages[page]})

    user = await _service(handler).get_user_by_phone("+966500000003")

    assert user.uid == "c"
    assert requested == [("1", "2"), ("2", "2")]


@pytest.mark.asyncio
async def test_get_user_by_phone_ignores_plus_sign():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"users": [_user("a", "966500000001")]})

    user = await _service(handler).get_user_by_phone("966500000001")
    assert user.uid == "a"


@pytest.mark.asyncio
async def test_get_user_by_phone_not_found():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.params["page"])
        return httpx.Response(200, json={"users": [_user("a", "966500000001")]})

    with pytest.raises(IdentityNotFound) as exc:
        await _service(handler).get_user_by_phone("+966599999999")

    assert exc.value.phone == "+966599999999"
    assert calls == ["1"]


@pytest.mark.asyncio
async def test_get_user_by_phone_api_failure_is_not_not_found():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="boom")

    with pytest.raises(RuntimeError) as exc:
        await _service(handler).get_user_by_phone("+966500000000")

    assert not isinstance(exc.value, IdentityNotFound)
    assert "supabase_admin_list_users_failed[500]" in str(exc.value)
