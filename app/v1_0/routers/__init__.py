from .product_router import router as product_router
from .sale_router import router as sale_router
from .sync_router import router as sync_router
defined_routers = [
    product_router,
    sale_router,
    sync_router,
    ]
