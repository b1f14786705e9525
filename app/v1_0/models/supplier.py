from datetime import datetime
from sqlalchemy import Boolean, String, DateTime, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column
from .base import Base

class Supplier(Base):
    """Supplier document. ``id`` is the document key; ``uid`` is the linked identity."""
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    uid: Mapped[str | None] = mapped_column(String, nullable=True, index=True)

    name: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    phone: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    company_name: Mapped[str | None] = mapped_column(String, nullable=True)
    cr_number: Mapped[str | None] = mapped_column(String, nullable=True)
    address: Mapped[str | None] = mapped_column(String, nullable=True)
    city: Mapped[str | None] = mapped_column(String, nullable=True)
    region: Mapped[str | None] = mapped_column(String, nullable=True)
    other_cities_served: Mapped[list[str]] = mapped_column(
        JSONB, nullable=False, default=list, server_default=text("'[]'::jsonb")
    )
    delivery_option: Mapped[str | None] = mapped_column(String, nullable=True)

    representative_phone: Mapped[str | None] = mapped_column(String, nullable=True)
    representative_name: Mapped[str | None] = mapped_column(String, nullable=True)
    representative_email: Mapped[str | None] = mapped_column(String, nullable=True)

    logo_url: Mapped[str | None] = mapped_column(String, nullable=True)
    cr_license_url: Mapped[str | None] = mapped_column(String, nullable=True)

    role: Mapped[str] = mapped_column(String, nullable=False, default="supplier", server_default="supplier")
    is_approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=text("false"))
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
