"""Core domain entities."""

from stockledger.core.entities.movement import (
    Movement,
    MovementFilters,
    MovementType,
    ProductSnapshot,
)
from stockledger.core.entities.photo import Photo
from stockledger.core.entities.product import (
    PRODUCT_CATEGORIES,
    Product,
    StockStatus,
    ensure_utc,
    new_id,
    utcnow,
)

__all__ = [
    # Product
    "Product",
    "PRODUCT_CATEGORIES",
    "StockStatus",
    # Movement
    "Movement",
    "MovementFilters",
    "MovementType",
    "ProductSnapshot",
    # Photo
    "Photo",
    # Helpers
    "ensure_utc",
    "new_id",
    "utcnow",
]
