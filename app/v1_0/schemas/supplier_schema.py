from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SupplierFields(BaseModel):
    """Supplier fields as received from a request. Every field is optional here;
    required fields are enforced by the workflow."""
    model_config = _CAMEL

    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    company_name: Optional[str] = None
    cr_number: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    region: Optional[str] = None
    other_cities_served: Optional[List[str]] = None
    delivery_option: Optional[str] = None
    representative_phone: Optional[str] = None
    representative_name: Optional[str] = None
    representative_email: Optional[str] = None


class SupplierCreate(SupplierFields):
    """Input schema to create a supplier."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "name": "Ali",
                "phone": "+966500000000",
                "email": "a@x.com",
                "companyName": "Acme",
                "crNumber": "123",
                "city": "Riyadh",
                "otherCitiesServed": ["Jeddah", "Dammam"],
            }
        },
    )


class SupplierUpdate(SupplierFields):
    """Edit schema for a supplier. Falsy values keep the stored value."""


class SupplierRecord(BaseModel):
    """Supplier document as stored and returned."""
    model_config = _CAMEL

    uid: Optional[str] = None
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    company_name: Optional[str] = None
    cr_number: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    region: Optional[str] = None
    other_cities_served: List[str] = Field(default_factory=list)
    delivery_option: Optional[str] = None
    representative_phone: Optional[str] = None
    representative_name: Optional[str] = None
    representative_email: Optional[str] = None
    logo_url: Optional[str] = None
    cr_license_url: Optional[str] = None
    role: str = "supplier"
    is_approved: bool = False
    approved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SupplierCreatedOut(BaseModel):
    id: str
    message: str


class SupplierUpdatedOut(BaseModel):
    model_config = _CAMEL

    message: str
    updated_data: SupplierRecord


class MessageOut(BaseModel):
    message: str
    uid: Optional[str] = None
