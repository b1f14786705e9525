from .collaborators import IdentityProvider, BlobStore, DocumentStore, IdentityNotFound
from .supabase_admin import SupabaseAdminService
from .supplier_service import SupplierService
__all__=[
    "IdentityProvider",
    "BlobStore",
    "DocumentStore",
    "IdentityNotFound",
    "SupabaseAdminService",
    "SupplierService",
    ]
