"""Product domain entity."""

import uuid
from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Suggested categories for the catalogue; free text is still accepted.
PRODUCT_CATEGORIES: tuple[str, ...] = (
    "Tablecloths",
    "Blankets",
    "Table runners",
    "Bags",
    "Textile accessories",
)


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(UTC)


def new_id() -> str:
    """Opaque unique identifier for entities."""
    return str(uuid.uuid4())


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class StockStatus(str, Enum):
    """Stock level classification."""

    OUT_OF_STOCK = "out-of-stock"
    LOW_STOCK = "low-stock"
    IN_STOCK = "in-stock"


class Product(BaseModel):
    """A stocked item with its moving-average unit cost."""

    model_config = ConfigDict(allow_inf_nan=False)

    id: str = Field(default_factory=new_id)
    name: str
    category: str
    quantity: int = Field(default=0, ge=0)
    price: float = 0.0  # sale price
    average_cost: float = Field(default=0.0, ge=0)  # moving average unit cost
    notes: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("created_at", "updated_at")
    @classmethod
    def normalize_timestamps(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @property
    def inventory_value(self) -> float:
        """Carrying value of stock on hand = quantity * average_cost."""
        return self.quantity * self.average_cost

    @property
    def unit_margin(self) -> float:
        return self.price - self.average_cost

    @property
    def margin_percent(self) -> float:
        """Margin over sale price, 0 when the product has no price."""
        if self.price == 0:
            return 0.0
        return (self.price - self.average_cost) / self.price * 100
