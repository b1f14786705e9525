"""
HTTP surface tests: status codes, camelCase bodies and error bodies
"""

from dependency_injector import providers

from app.core.settings import settings

PREFIX = settings.API_PREFIX
PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32

FORM = {
    "name": "Ali",
    "phone": "+966500000000",
    "email": "a@x.com",
    "companyName": "Acme",
    "crNumber": "123",
    "city": "Riyadh",
    "otherCitiesServed": ["Jeddah", "Dammam"],
}


def _url(path: str) -> str:
    return f"{PREFIX}{path}"


def _create(client, **extra):
    return client.post(_url("/create-supplier"), data={**FORM, **extra})


def test_root(client):
    res = client.get("/")
    assert res.status_code == 200
    assert res.json() == {"message": settings.APP_NAME}


def test_ready(client):
    res = client.get(_url("/ready"))
    assert res.status_code == 200
    assert res.json()["message"] == "ready"


def test_create_and_get(client, blobs):
    res = client.post(
        _url("/create-supplier"),
        data=FORM,
        files={
            "companyLogo": ("logo.png", PNG, "image/png"),
            "crLicense": ("license.pdf", b"%PDF-1.4 data", "application/pdf"),
        },
    )
    assert res.status_code == 201
    body = res.json()
    assert body["message"] == "Supplier created successfully"
    uid = body["id"]

    res = client.get(_url(f"/get-supplier/{uid}"))
    assert res.status_code == 200
    doc = res.json()
    assert doc["uid"] == uid
    assert doc["companyName"] == "Acme"
    assert doc["crNumber"] == "123"
    assert doc["otherCitiesServed"] == ["Jeddah", "Dammam"]
    assert doc["role"] == "supplier"
    assert doc["isApproved"] is False
    assert doc["logoUrl"].startswith(f"{blobs.base_url}/logos/{uid}/")
    assert doc["crLicenseUrl"].startswith(f"{blobs.base_url}/licenses/{uid}/")


def test_create_cities_as_json_string(client, documents):
    res = _create(client, otherCitiesServed='["Abha", "Tabuk"]')
    assert res.status_code == 201
    assert documents.docs[res.json()["id"]]["other_cities_served"] == ["Abha", "Tabuk"]


def test_create_missing_fields(client, identity):
    res = client.post(_url("/create-supplier"), data={"name": "Ali", "phone": "+966500000000"})
    assert res.status_code == 400
    body = res.json()
    assert body["error"] == "Missing required fields"
    assert "email" in body["details"]
    assert identity.calls == []


def test_create_invalid_phone(client):
    res = _create(client, phone="0500")
    assert res.status_code == 400
    assert res.json()["error"] == "Invalid phone number format"


def test_create_identity_failure(client, identity):
    identity.failures["create_user"] = RuntimeError("phone_exists")

    res = _create(client)
    assert res.status_code == 500
    assert res.json() == {"error": "Failed to create supplier", "details": "phone_exists"}


def test_create_oversized_upload(client, identity, monkeypatch):
    monkeypatch.setattr(settings, "UPLOAD_MAX_MB", 1)

    res = client.post(
        _url("/create-supplier"),
        data=FORM,
        files={"companyLogo": ("logo.png", b"x" * (1024 * 1024 + 1), "image/png")},
    )
    assert res.status_code == 400
    assert res.json()["details"] == "companyLogo"
    assert identity.calls == []


def test_create_sniffs_generic_content_type(client, blobs):
    res = client.post(
        _url("/create-supplier"),
        data=FORM,
        files={"companyLogo": ("logo.png", PNG, "application/octet-stream")},
    )
    assert res.status_code == 201
    ((_, content_type),) = blobs.objects.values()
    assert content_type == "image/png"


def test_get_unknown(client):
    res = client.get(_url("/get-supplier/missing"))
    assert res.status_code == 404
    assert res.json()["error"] == "Supplier not found"


def test_edit_returns_updated_data(client):
    uid = _create(client).json()["id"]

    res = client.put(
        _url(f"/edit-supplier/{uid}"),
        data={"name": "", "companyName": "Acme Trading", "otherCitiesServed": ["Abha"]},
    )
    assert res.status_code == 200
    body = res.json()
    assert body["message"] == "Supplier updated successfully"
    assert body["updatedData"]["name"] == "Ali"
    assert body["updatedData"]["companyName"] == "Acme Trading"
    assert body["updatedData"]["otherCitiesServed"] == ["Abha"]


def test_edit_without_cities_clears_them(client):
    uid = _create(client).json()["id"]

    res = client.put(_url(f"/edit-supplier/{uid}"), data={"city": "Jeddah"})
    assert res.status_code == 200
    assert res.json()["updatedData"]["otherCitiesServed"] == []


def test_edit_unknown(client):
    res = client.put(_url("/edit-supplier/missing"), data={"name": "X"})
    assert res.status_code == 404


def test_edit_phone_in_use(client, identity):
    identity.seed("other", "+966511111111")
    uid = _create(client).json()["id"]

    res = client.put(_url(f"/edit-supplier/{uid}"), data={"phone": "+966511111111"})
    assert res.status_code == 400
    assert res.json()["error"] == "Phone number already in use"


def test_delete(client):
    uid = _create(client).json()["id"]

    res = client.delete(_url(f"/delete-supplier/{uid}"))
    assert res.status_code == 200
    assert res.json() == {"message": "Supplier deleted successfully"}
    assert client.get(_url(f"/get-supplier/{uid}")).status_code == 404


def test_delete_unknown(client):
    assert client.delete(_url("/delete-supplier/missing")).status_code == 404


def test_approve(client):
    uid = _create(client).json()["id"]

    res = client.put(_url(f"/approve-supplier/{uid}"))
    assert res.status_code == 200
    assert res.json() == {"message": "Supplier approved successfully."}
    doc = client.get(_url(f"/get-supplier/{uid}")).json()
    assert doc["isApproved"] is True
    assert doc["approvedAt"] is not None


def test_approve_unknown(client):
    assert client.put(_url("/approve-supplier/missing")).status_code == 404


def test_authenticate_created_then_existing(client, documents):
    documents.docs["doc-1"] = {
        "uid": "legacy",
        "name": "Ali",
        "phone": "+966500000000",
        "email": "a@x.com",
        "company_name": "Acme",
        "cr_number": "123",
    }

    res = client.post(_url("/authenticate-supplier/doc-1"))
    assert res.status_code == 201
    body = res.json()
    assert body["message"] == "User authenticated successfully"
    assert documents.docs["doc-1"]["uid"] == body["uid"]

    res = client.post(_url("/authenticate-supplier/doc-1"))
    assert res.status_code == 200
    assert res.json() == {"message": "User already authenticated"}


def test_authenticate_missing_phone(client, documents):
    documents.docs["doc-1"] = {"uid": "doc-1", "name": "Ali"}

    res = client.post(_url("/authenticate-supplier/doc-1"))
    assert res.status_code == 400
    assert res.json()["error"] == "Supplier missing phone number"


def test_storage_failure_body(client, blobs):
    blobs.failures["save"] = RuntimeError("bucket unavailable")

    res = client.post(
        _url("/create-supplier"),
        data=FORM,
        files={"companyLogo": ("logo.png", PNG, "image/png")},
    )
    assert res.status_code == 500
    assert res.json() == {
        "error": "Failed to upload supplier file",
        "details": "bucket unavailable",
    }


def test_edit_unknown_with_empty_file_is_not_found(client, blobs):
    res = client.put(
        _url("/edit-supplier/missing"),
        data={"name": "X"},
        files={"companyLogo": ("logo.png", b"", "image/png")},
    )
    assert res.status_code == 404
    assert res.json()["error"] == "Supplier not found"
    assert blobs.calls == []


def test_edit_unknown_with_oversized_file_is_not_found(client, monkeypatch):
    monkeypatch.setattr(settings, "UPLOAD_MAX_MB", 1)

    res = client.put(
        _url("/edit-supplier/missing"),
        files={"crLicense": ("license.pdf", b"x" * (1024 * 1024 + 1), "application/pdf")},
    )
    assert res.status_code == 404


def test_edit_existing_with_empty_file_is_rejected(client, identity):
    uid = _create(client).json()["id"]

    res = client.put(
        _url(f"/edit-supplier/{uid}"),
        files={"companyLogo": ("logo.png", b"", "image/png")},
    )
    assert res.status_code == 400
    assert res.json() == {"error": "empty file", "details": "companyLogo"}


class _BrokenService:
    async def get(self, supplier_id):
        raise RuntimeError("unexpected shape")

    async def approve(self, supplier_id):
        raise KeyError("is_approved")


def test_unexpected_error_uses_error_body(client):
    api = client.app.state.container.api_container
    api.supplier_service.override(providers.Object(_BrokenService()))
    try:
        res = client.get(_url("/get-supplier/u1"))
        assert res.status_code == 500
        assert res.json() == {"error": "Failed to fetch supplier", "details": "unexpected shape"}

        res = client.put(_url("/approve-supplier/u1"))
        assert res.status_code == 500
        assert res.json()["error"] == "Failed to approve supplier"
        assert set(res.json()) == {"error", "details"}
    finally:
        api.supplier_service.reset_override()
