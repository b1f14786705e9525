from typing import List, Optional, Tuple
from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status
from dependency_injector.wiring import inject, Provide

from app.app_containers import ApplicationContainer
from app.core.errors import InvalidInput, SupplierWorkflowError
from app.core.logger import logger
from app.core.settings import settings
from app.storage.cloud_storage.types import resolve_content_type

from app.v1_0.entities import UploadDTO
from app.v1_0.schemas import (
    SupplierCreate,
    SupplierUpdate,
    SupplierRecord,
    SupplierCreatedOut,
    SupplierUpdatedOut,
    MessageOut,
)
from app.v1_0.services import SupplierService

router = APIRouter(tags=["Suppliers"])


async def _read_upload(upload: Optional[UploadFile], field: str) -> Optional[UploadDTO]:
    if upload is None or not upload.filename:
        return None
    data = await upload.read()
    if not data:
        raise InvalidInput("empty file", details=field)
    if len(data) > settings.UPLOAD_MAX_BYTES:
        raise InvalidInput(f"file exceeds {settings.UPLOAD_MAX_MB}MB", details=field)
    ct = resolve_content_type(upload.content_type, data)
    return UploadDTO(filename=upload.filename, content_type=ct, data=data)


async def _read_uploads(
    company_logo: Optional[UploadFile],
    cr_license: Optional[UploadFile],
) -> Tuple[Optional[UploadDTO], Optional[UploadDTO]]:
    return (
        await _read_upload(company_logo, "companyLogo"),
        await _read_upload(cr_license, "crLicense"),
    )


@router.get(
    "/get-supplier/{supplier_id}",
    response_model=SupplierRecord,
    summary="Get supplier by ID",
)
@inject
async def get_supplier(
    supplier_id: str,
    service: SupplierService = Depends(Provide[ApplicationContainer.api_container.supplier_service]),
):
    logger.debug(f"[SupplierRouter] get id={supplier_id}")
    try:
        return await service.get(supplier_id)
    except SupplierWorkflowError:
        raise
    except Exception as e:
        logger.error(f"[SupplierRouter] get error: {e}", exc_info=True)
        raise SupplierWorkflowError("Failed to fetch supplier", details=str(e)) from e


@router.post(
    "/create-supplier",
    response_model=SupplierCreatedOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new supplier",
)
@inject
async def create_supplier(
    name: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    company_name: Optional[str] = Form(None, alias="companyName"),
    cr_number: Optional[str] = Form(None, alias="crNumber"),
    address: Optional[str] = Form(None),
    city: Optional[str] = Form(None),
    region: Optional[str] = Form(None),
    other_cities_served: Optional[List[str]] = Form(None, alias="otherCitiesServed"),
    delivery_option: Optional[str] = Form(None, alias="deliveryOption"),
    representative_phone: Optional[str] = Form(None, alias="representativePhone"),
    representative_name: Optional[str] = Form(None, alias="representativeName"),
    representative_email: Optional[str] = Form(None, alias="representativeEmail"),
    company_logo: Optional[UploadFile] = File(None, alias="companyLogo"),
    cr_license: Optional[UploadFile] = File(None, alias="crLicense"),
    service: SupplierService = Depends(Provide[ApplicationContainer.api_container.supplier_service]),
) -> SupplierCreatedOut:
    payload = SupplierCreate(
        name=name,
        phone=phone,
        email=email,
        company_name=company_name,
        cr_number=cr_number,
        address=address,
        city=city,
        region=region,
        other_cities_served=other_cities_served,
        delivery_option=delivery_option,
        representative_phone=representative_phone,
        representative_name=representative_name,
        representative_email=representative_email,
    )
    logger.info(
        "[SupplierRouter] create payload=%s",
        payload.model_dump(exclude_none=True),
    )

    try:
        logo, license_ = await _read_uploads(company_logo, cr_license)
        uid = await service.create(payload, company_logo=logo, cr_license=license_)
    except SupplierWorkflowError:
        raise
    except Exception as e:
        logger.error(
            "[SupplierRouter] create error: %s",
            e,
            exc_info=True,
        )
        raise SupplierWorkflowError(
            "Failed to create supplier",
            details=str(e),
        ) from e
    return SupplierCreatedOut(id=uid, message="Supplier created successfully")


@router.put(
    "/edit-supplier/{supplier_id}",
    response_model=SupplierUpdatedOut,
    summary="Edit a supplier",
)
@inject
async def edit_supplier(
    supplier_id: str,
    name: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    company_name: Optional[str] = Form(None, alias="companyName"),
    cr_number: Optional[str] = Form(None, alias="crNumber"),
    address: Optional[str] = Form(None),
    city: Optional[str] = Form(None),
    region: Optional[str] = Form(None),
    other_cities_served: Optional[List[str]] = Form(None, alias="otherCitiesServed"),
    delivery_option: Optional[str] = Form(None, alias="deliveryOption"),
    representative_phone: Optional[str] = Form(None, alias="representativePhone"),
    representative_name: Optional[str] = Form(None, alias="representativeName"),
    representative_email: Optional[str] = Form(None, alias="representativeEmail"),
    company_logo: Optional[UploadFile] = File(None, alias="companyLogo"),
    cr_license: Optional[UploadFile] = File(None, alias="crLicense"),
    service: SupplierService = Depends(Provide[ApplicationContainer.api_container.supplier_service]),
) -> SupplierUpdatedOut:
    payload = SupplierUpdate(
        name=name,
        phone=phone,
        email=email,
        company_name=company_name,
        cr_number=cr_number,
        address=address,
        city=city,
        region=region,
        other_cities_served=other_cities_served,
        delivery_option=delivery_option,
        representative_phone=representative_phone,
        representative_name=representative_name,
        representative_email=representative_email,
    )
    logger.info(
        "[SupplierRouter] update id=%s data=%s",
        supplier_id,
        payload.model_dump(exclude_none=True),
    )

    try:
        # id desconocido => 404 aunque los archivos sean inválidos
        await service.ensure_exists(supplier_id)
        logo, license_ = await _read_uploads(company_logo, cr_license)
        record = await service.edit(
            supplier_id,
            payload,
            company_logo=logo,
            cr_license=license_,
        )
    except SupplierWorkflowError:
        raise
    except Exception as e:
        logger.error(
            "[SupplierRouter] update error: %s",
            e,
            exc_info=True,
        )
        raise SupplierWorkflowError(
            "Failed to update supplier",
            details=str(e),
        ) from e
    return SupplierUpdatedOut(message="Supplier updated successfully", updated_data=record)


@router.delete(
    "/delete-supplier/{supplier_id}",
    response_model=MessageOut,
    response_model_exclude_none=True,
    summary="Delete a supplier",
)
@inject
async def delete_supplier(
    supplier_id: str,
    service: SupplierService = Depends(Provide[ApplicationContainer.api_container.supplier_service]),
) -> MessageOut:
    logger.warning(
        "[SupplierRouter] delete id=%s",
        supplier_id,
    )
    try:
        await service.delete(supplier_id)
    except SupplierWorkflowError:
        raise
    except Exception as e:
        logger.error(
            "[SupplierRouter] delete error: %s",
            e,
            exc_info=True,
        )
        raise SupplierWorkflowError(
            "Failed to delete supplier",
            details=str(e),
        ) from e
    return MessageOut(message="Supplier deleted successfully")


@router.put(
    "/approve-supplier/{supplier_id}",
    response_model=MessageOut,
    response_model_exclude_none=True,
    summary="Approve a supplier",
)
@inject
async def approve_supplier(
    supplier_id: str,
    service: SupplierService = Depends(Provide[ApplicationContainer.api_container.supplier_service]),
) -> MessageOut:
    logger.info(f"[SupplierRouter] approve id={supplier_id}")
    try:
        await service.approve(supplier_id)
    except SupplierWorkflowError:
        raise
    except Exception as e:
        logger.error(f"[SupplierRouter] approve error: {e}", exc_info=True)
        raise SupplierWorkflowError("Failed to approve supplier", details=str(e)) from e
    return MessageOut(message="Supplier approved successfully.")


@router.post(
    "/authenticate-supplier/{supplier_id}",
    response_model=MessageOut,
    response_model_exclude_none=True,
    summary="Create the phone identity of a supplier if missing",
    responses={201: {"model": MessageOut, "description": "Identity created and linked"}},
)
@inject
async def authenticate_supplier(
    supplier_id: str,
    response: Response,
    service: SupplierService = Depends(Provide[ApplicationContainer.api_container.supplier_service]),
) -> MessageOut:
    logger.info(f"[SupplierRouter] authenticate id={supplier_id}")
    try:
        result = await service.authenticate(supplier_id)
    except SupplierWorkflowError:
        raise
    except Exception as e:
        logger.error(f"[SupplierRouter] authenticate error: {e}", exc_info=True)
        raise SupplierWorkflowError("Failed to authenticate supplier", details=str(e)) from e

    if result.created:
        response.status_code = status.HTTP_201_CREATED
    return MessageOut(message=result.message, uid=result.uid)
