from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse

from app.core.logger import logger

if TYPE_CHECKING:
    from app.utils.effects import Effect


class SupplierWorkflowError(Exception):
    """
    Base error of the supplier workflow.

    Carries the HTTP status it maps to, a public message, the provider
    message (``details``) and the external effects that were already
    applied when the failure happened (orphans).
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Supplier operation failed"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        details: Optional[str] = None,
        effects: Optional[Iterable["Effect"]] = None,
    ) -> None:
        self.message = message or type(self).message
        self.details = details
        self.effects: List["Effect"] = list(effects or [])
        super().__init__(self.message)

    def to_body(self) -> Dict[str, Any]:
        return {"error": self.message, "details": self.details}


class InvalidInput(SupplierWorkflowError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Missing required fields"


class InvalidPhoneFormat(InvalidInput):
    message = "Invalid phone number format"


class MissingPhone(InvalidInput):
    message = "Supplier missing phone number"


class NotFound(SupplierWorkflowError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Supplier not found"


class PhoneInUse(SupplierWorkflowError):
    # conflicto de negocio, no 409: los clientes esperan 400
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Phone number already in use"


class IdentityError(SupplierWorkflowError):
    message = "Identity provider request failed"


class IdentityCreateError(IdentityError):
    message = "Failed to create identity"


class IdentityUpdateError(IdentityError):
    message = "Failed to update phone number in identity provider"


class IdentityDeleteError(IdentityError):
    message = "Failed to delete identity provider user"


class IdentityLookupError(IdentityError):
    message = "Error checking phone number"


class StorageError(SupplierWorkflowError):
    message = "Failed to upload supplier file"


class DocumentError(SupplierWorkflowError):
    message = "Failed to write supplier document"


async def supplier_error_handler(request: Request, exc: SupplierWorkflowError) -> JSONResponse:
    """Log a workflow error with its context and render the JSON error body."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "[%s %s] %s: %s details=%s",
        request.method,
        request.url.path,
        type(exc).__name__,
        exc.message,
        exc.details,
    )
    if exc.effects:
        logger.error(
            "[%s %s] orphaned effects left behind: %s",
            request.method,
            request.url.path,
            [e.describe() for e in exc.effects],
        )
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())
