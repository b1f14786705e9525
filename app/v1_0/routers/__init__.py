from .supplier_router import router as supplier_router
defined_routers = [
    supplier_router,
    ]
