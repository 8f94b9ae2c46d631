"""Movement (ledger entry) domain entities."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from stockledger.core.entities.product import ensure_utc, new_id, utcnow


class MovementType(str, Enum):
    """Kinds of inventory events recorded in the ledger."""

    SALE = "sale"
    PRODUCTION = "production"
    ADJUSTMENT = "adjustment"


class ProductSnapshot(BaseModel):
    """Display fields of a product frozen at the time a movement was recorded."""

    model_config = ConfigDict(frozen=True)

    name: str
    category: str


class Movement(BaseModel):
    """
    Immutable ledger entry for one inventory event.

    ``product_id`` is a weak reference: the product may since have been
    deleted, in which case ``product_snapshot`` is the only display source.
    """

    model_config = ConfigDict(allow_inf_nan=False)

    id: str = Field(default_factory=new_id)
    product_id: str
    type: MovementType
    quantity: int  # negative = outflow, positive = inflow
    unit_price: float | None = None  # sales only
    unit_cost: float | None = None  # production only
    total_amount: float = 0.0
    average_cost_at_time: float = 0.0  # never recomputed after creation
    notes: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    product_snapshot: ProductSnapshot

    @field_validator("created_at")
    @classmethod
    def normalize_created_at(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @property
    def is_inbound(self) -> bool:
        return self.quantity > 0

    @property
    def is_outbound(self) -> bool:
        return self.quantity < 0


class MovementFilters(BaseModel):
    """Optional filters for listing movements."""

    product_id: str | None = None
    type: MovementType | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_bounds(cls, v: datetime | None) -> datetime | None:
        return ensure_utc(v) if v is not None else None
