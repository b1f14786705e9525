import json
import re
from datetime import datetime, timezone
from pathlib import PurePosixPath
from typing import Any, Dict, List, Optional, Sequence, Union

from app.core.errors import (
    DocumentError,
    IdentityCreateError,
    IdentityDeleteError,
    IdentityLookupError,
    IdentityUpdateError,
    InvalidInput,
    InvalidPhoneFormat,
    MissingPhone,
    NotFound,
    PhoneInUse,
    StorageError,
)
from app.core.logger import logger
from app.utils.effects import EffectLedger, ExternalSystem
from app.v1_0.entities import AuthenticationDTO, UploadDTO
from app.v1_0.schemas import SupplierCreate, SupplierRecord, SupplierUpdate
from app.v1_0.services.collaborators import (
    BlobStore,
    DocumentStore,
    IdentityNotFound,
    IdentityProvider,
)

PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{1,14}$")
SUPPLIER_ROLE = "supplier"
LOGO_FOLDER = "logos"
LICENSE_FOLDER = "licenses"

REQUIRED_FIELDS = ("name", "phone", "email", "company_name", "cr_number")

# campos escalares con política "valor nuevo o el existente"
FALLBACK_FIELDS = (
    "name",
    "phone",
    "email",
    "company_name",
    "cr_number",
    "address",
    "city",
    "region",
    "delivery_option",
    "representative_phone",
    "representative_name",
    "representative_email",
)


def is_valid_phone(phone: Optional[str]) -> bool:
    return bool(phone) and PHONE_PATTERN.match(phone) is not None


def replace_cities_served(value: Union[None, str, Sequence[str]]) -> List[str]:
    """
    Replace policy for ``other_cities_served``: the stored list is always
    overwritten by the provided one, and an absent value means ``[]``.
    Never merged with the existing list.

    Accepts a native list, or a single JSON-encoded array (as a string or as
    the only list item).

    Raises:
        InvalidInput: If a JSON value is malformed or not a list of strings.
    """
    if not value:
        return []
    if isinstance(value, str):
        encoded: Optional[str] = value
    elif len(value) == 1 and value[0].lstrip().startswith("["):
        encoded = value[0]
    else:
        encoded = None

    if encoded is not None:
        try:
            parsed = json.loads(encoded)
        except ValueError as e:
            raise InvalidInput("Invalid otherCitiesServed", details=str(e)) from e
        if not isinstance(parsed, list) or any(not isinstance(c, str) for c in parsed):
            raise InvalidInput("Invalid otherCitiesServed", details="expected a list of strings")
        items: Sequence[str] = parsed
    else:
        items = value

    return [c.strip() for c in items if c and c.strip()]


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _blob_path(folder: str, uid: str, upload: UploadDTO, at: datetime) -> str:
    name = PurePosixPath(upload.filename.replace("\\", "/")).name or "file"
    return f"{folder}/{uid}/{int(at.timestamp() * 1000)}_{name}"


class SupplierService:
    """
    Supplier record workflow over three external systems: identity provider,
    blob store and document store.

    Every operation is a sequential chain of awaited calls with no
    transaction across systems. Mutating steps go through an EffectLedger,
    so a failure reports the effects already applied (orphans). Nothing is
    rolled back or retried.
    """

    def __init__(
        self,
        identity_provider: IdentityProvider,
        blob_store: BlobStore,
        document_store: DocumentStore,
    ) -> None:
        self.identity = identity_provider
        self.blobs = blob_store
        self.documents = document_store

    async def _require(self, supplier_id: str) -> Dict[str, Any]:
        """
        Fetch a supplier document or raise NotFound.

        Raises:
            NotFound: If no document exists under ``supplier_id``.
            DocumentError: If the document store fails.
        """
        try:
            doc = await self.documents.get(supplier_id)
        except Exception as e:
            logger.error(
                "[SupplierService] Fetch failed ID=%s: %s",
                supplier_id,
                e,
                exc_info=True,
            )
            raise DocumentError("Failed to fetch supplier", details=str(e)) from e
        if doc is None:
            logger.warning("[SupplierService] Supplier not found ID=%s", supplier_id)
            raise NotFound()
        return doc

    async def _upload(
        self,
        ledger: EffectLedger,
        step: str,
        folder: str,
        uid: str,
        upload: UploadDTO,
    ) -> str:
        path = _blob_path(folder, uid, upload, _now())
        return await ledger.step(
            step,
            self.blobs.save(path, upload.data, content_type=upload.content_type),
            system=ExternalSystem.STORAGE,
            target=path,
            error=StorageError,
        )

    async def get(self, supplier_id: str) -> SupplierRecord:
        """
        Retrieve a single supplier document.

        Raises:
            NotFound: If the supplier does not exist.
            DocumentError: If the document store fails.
        """
        logger.debug(f"[SupplierService] Get supplier ID={supplier_id}")
        return SupplierRecord.model_validate(await self._require(supplier_id))

    async def ensure_exists(self, supplier_id: str) -> None:
        """Raise NotFound (or DocumentError) before any request payload is inspected."""
        await self._require(supplier_id)

    async def create(
        self,
        payload: SupplierCreate,
        company_logo: Optional[UploadDTO] = None,
        cr_license: Optional[UploadDTO] = None,
    ) -> str:
        """
        Create a supplier: identity, then files, then document.

        Steps:
        - create_identity (phone + display name); aborts before any upload.
        - upload_logo / upload_license for each provided file.
        - write_document with every field, the URLs, role and createdAt.

        Args:
            payload: Supplier fields; name, phone, email, companyName and
                crNumber are required.
            company_logo: Optional logo upload.
            cr_license: Optional commercial-registration license upload.

        Returns:
            The identity id, which is also the document key.

        Raises:
            InvalidInput: Missing required field or malformed cities list.
            InvalidPhoneFormat: Phone (or representative phone) fails the pattern.
            IdentityCreateError: Identity provider rejected the user.
            StorageError: An upload failed (identity left orphaned).
            DocumentError: The document write failed (identity and blobs orphaned).
        """
        missing = [f for f in REQUIRED_FIELDS if not getattr(payload, f)]
        if missing:
            raise InvalidInput(details=", ".join(missing))
        if not is_valid_phone(payload.phone):
            raise InvalidPhoneFormat(details=payload.phone)
        if payload.representative_phone and not is_valid_phone(payload.representative_phone):
            raise InvalidPhoneFormat(details=payload.representative_phone)
        cities = replace_cities_served(payload.other_cities_served)

        logger.info(
            "[SupplierService] Creating supplier: phone=%s company=%s",
            payload.phone,
            payload.company_name,
        )
        ledger = EffectLedger("create_supplier", payload.phone)

        user = await ledger.step(
            "create_identity",
            self.identity.create_user(phone=payload.phone, display_name=payload.name),
            system=ExternalSystem.IDENTITY,
            target=payload.phone,
            error=IdentityCreateError,
            message="Failed to create supplier",
        )
        uid = user.uid

        logo_url = None
        if company_logo:
            logo_url = await self._upload(ledger, "upload_logo", LOGO_FOLDER, uid, company_logo)

        cr_license_url = None
        if cr_license:
            cr_license_url = await self._upload(ledger, "upload_license", LICENSE_FOLDER, uid, cr_license)

        document: Dict[str, Any] = {
            "uid": uid,
            "name": payload.name,
            "phone": payload.phone,
            "email": payload.email,
            "company_name": payload.company_name,
            "cr_number": payload.cr_number,
            "address": payload.address,
            "city": payload.city,
            "region": payload.region,
            "other_cities_served": cities,
            "delivery_option": payload.delivery_option,
            "representative_phone": payload.representative_phone,
            "representative_name": payload.representative_name,
            "representative_email": payload.representative_email,
            "logo_url": logo_url,
            "cr_license_url": cr_license_url,
            "role": SUPPLIER_ROLE,
            "is_approved": False,
            "created_at": _now(),
        }
        await ledger.step(
            "write_document",
            self.documents.set(uid, document),
            system=ExternalSystem.DOCUMENT,
            target=uid,
            error=DocumentError,
        )

        logger.info("[SupplierService] Supplier created ID=%s", uid)
        return uid

    async def edit(
        self,
        supplier_id: str,
        payload: SupplierUpdate,
        company_logo: Optional[UploadDTO] = None,
        cr_license: Optional[UploadDTO] = None,
    ) -> SupplierRecord:
        """
        Edit an existing supplier.

        Operations:
        - When a phone is given: validate it, make sure no other identity
          holds it, then update the identity's phone.
        - Upload provided files to new timestamped paths (previous blobs stay).
        - Merge scalar fields with the fallback policy: a falsy new value
          (including "") keeps the stored one.
        - Overwrite ``other_cities_served`` with the replace policy.
        - Write merged fields plus updatedAt.

        Returns:
            The merged SupplierRecord.

        Raises:
            NotFound: If the supplier does not exist.
            InvalidPhoneFormat: Phone (or representative phone) fails the pattern.
            PhoneInUse: Another identity already holds the phone.
            IdentityLookupError: The phone lookup failed for another reason.
            IdentityUpdateError: The phone update failed; nothing else touched.
            StorageError / DocumentError: Later steps failed (earlier effects kept).
        """
        logger.info("[SupplierService] Update supplier ID=%s", supplier_id)
        existing = await self._require(supplier_id)

        if payload.representative_phone and not is_valid_phone(payload.representative_phone):
            raise InvalidPhoneFormat(details=payload.representative_phone)
        cities = replace_cities_served(payload.other_cities_served)

        ledger = EffectLedger("edit_supplier", supplier_id)

        phone = payload.phone
        if phone:
            logger.info(
                "[SupplierService] Updating phone number for user %s: %s",
                supplier_id,
                phone,
            )
            if not is_valid_phone(phone):
                raise InvalidPhoneFormat(details=phone)

            try:
                holder = await self.identity.get_user_by_phone(phone)
            except IdentityNotFound:
                holder = None
            except Exception as e:
                logger.error(
                    "[SupplierService] Phone lookup failed ID=%s: %s",
                    supplier_id,
                    e,
                    exc_info=True,
                )
                raise IdentityLookupError(details=str(e)) from e

            if holder is not None and holder.uid != supplier_id:
                raise PhoneInUse(details=phone)

            await ledger.step(
                "update_identity_phone",
                self.identity.update_user(supplier_id, phone=phone),
                system=ExternalSystem.IDENTITY,
                target=supplier_id,
                error=IdentityUpdateError,
            )

        logo_url = existing.get("logo_url")
        if company_logo:
            logo_url = await self._upload(ledger, "upload_logo", LOGO_FOLDER, supplier_id, company_logo)

        cr_license_url = existing.get("cr_license_url")
        if cr_license:
            cr_license_url = await self._upload(ledger, "upload_license", LICENSE_FOLDER, supplier_id, cr_license)

        updates: Dict[str, Any] = {
            f: getattr(payload, f) or existing.get(f) for f in FALLBACK_FIELDS
        }
        updates["other_cities_served"] = cities
        updates["logo_url"] = logo_url
        updates["cr_license_url"] = cr_license_url
        updates["updated_at"] = _now()

        await ledger.step(
            "update_document",
            self.documents.update(supplier_id, updates),
            system=ExternalSystem.DOCUMENT,
            target=supplier_id,
            error=DocumentError,
            message="Failed to update supplier",
        )

        logger.info("[SupplierService] Supplier updated ID=%s", supplier_id)
        return SupplierRecord.model_validate({**existing, **updates})

    async def delete(self, supplier_id: str) -> None:
        """
        Delete a supplier: identity first, then the document.

        Raises:
            NotFound: If the supplier does not exist.
            IdentityDeleteError: Identity deletion failed; document kept.
            DocumentError: Document deletion failed after the identity was gone.
        """
        logger.warning("[SupplierService] Delete supplier ID=%s", supplier_id)
        await self._require(supplier_id)

        ledger = EffectLedger("delete_supplier", supplier_id)
        await ledger.step(
            "delete_identity",
            self.identity.delete_user(supplier_id),
            system=ExternalSystem.IDENTITY,
            target=supplier_id,
            error=IdentityDeleteError,
        )
        await ledger.step(
            "delete_document",
            self.documents.delete(supplier_id),
            system=ExternalSystem.DOCUMENT,
            target=supplier_id,
            error=DocumentError,
            message="Failed to delete supplier",
        )

    async def approve(self, supplier_id: str) -> None:
        """
        Mark a supplier as approved. Idempotent on the flag; the timestamp is
        refreshed on every call.

        Raises:
            NotFound: If the supplier does not exist.
            DocumentError: If the document update fails.
        """
        logger.info("[SupplierService] Approve supplier ID=%s", supplier_id)
        await self._require(supplier_id)

        ledger = EffectLedger("approve_supplier", supplier_id)
        await ledger.step(
            "approve_document",
            self.documents.update(supplier_id, {"is_approved": True, "approved_at": _now()}),
            system=ExternalSystem.DOCUMENT,
            target=supplier_id,
            error=DocumentError,
            message="Failed to approve supplier",
        )

    async def authenticate(self, supplier_id: str) -> AuthenticationDTO:
        """
        Ensure a phone identity exists for the supplier.

        Representative phone/name/email are preferred over the primary ones.
        If an identity already holds the phone nothing changes; otherwise one
        is created and the document's ``uid`` is relinked to it.

        Raises:
            NotFound: If the supplier does not exist.
            MissingPhone: If no phone can be resolved.
            IdentityLookupError: The lookup failed for a reason other than not-found.
            IdentityCreateError / DocumentError: Creation or relinking failed.
        """
        doc = await self._require(supplier_id)
        phone = doc.get("representative_phone") or doc.get("phone")
        name = doc.get("representative_name") or doc.get("name")
        email = doc.get("representative_email") or doc.get("email")

        if not phone:
            raise MissingPhone(details=supplier_id)

        try:
            await self.identity.get_user_by_phone(phone)
        except IdentityNotFound:
            pass
        except Exception as e:
            logger.error(
                "[SupplierService] Authenticate lookup failed ID=%s: %s",
                supplier_id,
                e,
                exc_info=True,
            )
            raise IdentityLookupError("Failed to authenticate supplier", details=str(e)) from e
        else:
            logger.info("[SupplierService] Supplier already authenticated ID=%s", supplier_id)
            return AuthenticationDTO(created=False, message="User already authenticated")

        ledger = EffectLedger("authenticate_supplier", supplier_id)
        user = await ledger.step(
            "create_identity",
            self.identity.create_user(phone=phone, display_name=name or "", email=email or None),
            system=ExternalSystem.IDENTITY,
            target=phone,
            error=IdentityCreateError,
            message="Failed to authenticate supplier",
        )
        await ledger.step(
            "link_identity",
            self.documents.update(supplier_id, {"uid": user.uid}),
            system=ExternalSystem.DOCUMENT,
            target=supplier_id,
            error=DocumentError,
            message="Failed to authenticate supplier",
        )

        logger.info(
            "[SupplierService] Supplier authenticated ID=%s uid=%s",
            supplier_id,
            user.uid,
        )
        return AuthenticationDTO(created=True, message="User authenticated successfully", uid=user.uid)
