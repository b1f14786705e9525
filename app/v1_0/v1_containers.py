from dependency_injector import containers, providers
from app.v1_0.repositories import SupplierRepository
from app.v1_0.services import SupabaseAdminService, SupplierService
from app.storage.cloud_storage import CloudStorageService

class APIContainer(containers.DeclarativeContainer):
    db_session = providers.Dependency()

    # colaboradores externos
    supplier_repository = providers.Singleton(
        SupplierRepository,
        session_factory = db_session
    )
    supabase_admin_service = providers.Singleton(
        SupabaseAdminService
    )
    cloud_storage_service = providers.Singleton(CloudStorageService)

    supplier_service = providers.Factory(
        SupplierService,
        identity_provider = supabase_admin_service,
        blob_store = cloud_storage_service,
        document_store = supplier_repository
    )
