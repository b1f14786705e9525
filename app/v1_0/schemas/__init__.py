from .supplier_schema import (
    SupplierFields,
    SupplierCreate,
    SupplierUpdate,
    SupplierRecord,
    SupplierCreatedOut,
    SupplierUpdatedOut,
    MessageOut,
    )
__all__ = [
    "SupplierFields", "SupplierCreate", "SupplierUpdate",
    "SupplierRecord",
    "SupplierCreatedOut", "SupplierUpdatedOut", "MessageOut",
]
