"""API route modules."""

from stockledger.api.routes.analytics import router as analytics_router
from stockledger.api.routes.backup import router as backup_router
from stockledger.api.routes.health import router as health_router
from stockledger.api.routes.movements import router as movements_router
from stockledger.api.routes.products import router as products_router

__all__ = [
    "health_router",
    "products_router",
    "movements_router",
    "analytics_router",
    "backup_router",
]
