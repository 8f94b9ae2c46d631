"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
These are the ONLY contracts between use cases and API layer.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from stockledger.core.entities import Movement, Product, utcnow
from stockledger.core.services.analytics import stock_status


# --- Products ---


class ProductResponse(BaseModel):
    """Product response DTO."""

    id: str
    name: str
    category: str
    quantity: int
    price: float
    average_cost: float
    inventory_value: float = Field(..., description="quantity * average_cost")
    unit_margin: float = Field(..., description="price - average_cost")
    margin_percent: float
    stock_status: str = Field(..., examples=["in-stock", "low-stock", "out-of-stock"])
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, product: Product, low_stock_threshold: int = 5) -> "ProductResponse":
        return cls(
            id=product.id,
            name=product.name,
            category=product.category,
            quantity=product.quantity,
            price=product.price,
            average_cost=product.average_cost,
            inventory_value=product.inventory_value,
            unit_margin=product.unit_margin,
            margin_percent=product.margin_percent,
            stock_status=stock_status(product.quantity, low_stock_threshold).value,
            notes=product.notes,
            created_at=product.created_at,
            updated_at=product.updated_at,
        )


class ProductListResponse(BaseModel):
    """List of products."""

    products: list[ProductResponse]
    total: int


# --- Movements ---


class ProductSnapshotResponse(BaseModel):
    name: str
    category: str


class MovementResponse(BaseModel):
    """Movement (ledger entry) response DTO."""

    id: str
    product_id: str
    type: str
    quantity: int
    unit_price: float | None = None
    unit_cost: float | None = None
    total_amount: float
    average_cost_at_time: float
    notes: str | None = None
    created_at: datetime
    product_snapshot: ProductSnapshotResponse

    @classmethod
    def from_entity(cls, movement: Movement) -> "MovementResponse":
        return cls(
            id=movement.id,
            product_id=movement.product_id,
            type=movement.type.value,
            quantity=movement.quantity,
            unit_price=movement.unit_price,
            unit_cost=movement.unit_cost,
            total_amount=movement.total_amount,
            average_cost_at_time=movement.average_cost_at_time,
            notes=movement.notes,
            created_at=movement.created_at,
            product_snapshot=ProductSnapshotResponse(
                name=movement.product_snapshot.name,
                category=movement.product_snapshot.category,
            ),
        )


class MovementListResponse(BaseModel):
    """List of movements, newest first."""

    movements: list[MovementResponse]
    total: int


class TransactionResponse(BaseModel):
    """Product state and ledger entry produced by one business event."""

    product: ProductResponse
    movement: MovementResponse


# --- Analytics ---


class FinancialSummaryResponse(BaseModel):
    """Business-wide financial summary."""

    total_revenue: float
    sold_products_cost: float
    inventory_value: float
    total_costs: float
    sales_profit: float
    profit_margin: float = Field(..., description="Percent, on goods sold")
    net_profit: float = Field(
        ..., description="Revenue minus sold cost and carrying cost of stock"
    )
    total_sales: int
    total_productions: int
    total_adjustments: int
    start_date: datetime | None = None
    end_date: datetime | None = None


class ProductStatsResponse(BaseModel):
    """Sales performance of one product."""

    product_id: str
    product_name: str
    total_sold: int
    revenue: float
    cost: float
    profit: float
    avg_sale_price: float


class ProductProfitabilityResponse(BaseModel):
    """Profitability of one product."""

    product_id: str
    total_revenue: float
    total_cost: float
    net_profit: float
    profit_margin: float
    units_sold: int
    units_produced: int


class CategoryValueResponse(BaseModel):
    category: str
    quantity: int
    value: float


# --- Backup ---


class ImportBackupResponse(BaseModel):
    """Counts of records restored from a backup."""

    schema_version: int = Field(..., description="Schema version after upcasting")
    exported_at: str
    products: int
    movements: int
    photos: int


# --- Health & errors ---


class DatabaseHealthResponse(BaseModel):
    """Database health status."""

    status: str
    products: int | None = None
    movements: int | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    schema_version: int
    database: DatabaseHealthResponse | None = None


class ErrorResponse(BaseModel):
    """Body of every non-2xx response."""

    error_code: str = Field(..., examples=["INSUFFICIENT_STOCK"])
    message: str
    hint: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)
    path: str | None = None
    request_id: str | None = None
    timestamp: datetime = Field(default_factory=utcnow)
