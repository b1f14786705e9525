from .base_repository import BaseRepository
from .supplier_repository import SupplierRepository, DOCUMENT_FIELDS

__all__ = [
    "BaseRepository",
    "SupplierRepository", "DOCUMENT_FIELDS",
]
