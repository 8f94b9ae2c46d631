"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
These are the ONLY contracts between API and use cases.

Business rules such as stock sufficiency are enforced by the costing
engine, not here, so rejections carry the ledger error codes.
"""

from pydantic import BaseModel, ConfigDict, Field


# --- Products ---


class CreateProductRequest(BaseModel):
    """Request to create a product."""

    model_config = ConfigDict(allow_inf_nan=False)

    name: str = Field(..., min_length=1, description="Product name")
    category: str = Field(
        ...,
        description="Product category (free text)",
        examples=["Tablecloths", "Blankets"],
    )
    quantity: int = Field(default=0, ge=0, description="Initial stock on hand")
    price: float = Field(default=0.0, ge=0, description="Sale price per unit")
    initial_cost: float = Field(
        default=0.0,
        ge=0,
        description="Unit cost of the initial stock (seeds the average cost)",
    )
    notes: str | None = Field(default=None, description="Additional notes")


class UpdateProductRequest(BaseModel):
    """Request to edit a product's descriptive fields.

    Stock and average cost are changed through movements only.
    """

    model_config = ConfigDict(allow_inf_nan=False)

    name: str | None = Field(default=None, min_length=1, description="Product name")
    category: str | None = Field(default=None, description="Product category")
    price: float | None = Field(default=None, ge=0, description="Sale price per unit")
    notes: str | None = Field(default=None, description="Additional notes")


# --- Movements ---


class RegisterSaleRequest(BaseModel):
    """Request to register a sale."""

    model_config = ConfigDict(allow_inf_nan=False)

    product_id: str = Field(..., description="Product ID")
    quantity: int = Field(..., description="Units sold")
    unit_price: float | None = Field(
        default=None,
        description="Sale price per unit (defaults to the product price)",
    )
    notes: str | None = Field(default=None, description="Additional notes")


class RegisterProductionRequest(BaseModel):
    """Request to register a production run."""

    model_config = ConfigDict(allow_inf_nan=False)

    product_id: str = Field(..., description="Product ID")
    quantity: int = Field(..., description="Units produced")
    unit_cost: float = Field(..., description="Cost per produced unit")
    notes: str | None = Field(default=None, description="Additional notes")


class RegisterAdjustmentRequest(BaseModel):
    """Request to register a manual stock adjustment."""

    product_id: str = Field(..., description="Product ID")
    delta: int = Field(..., description="Signed stock correction", examples=[-2, 5])
    notes: str | None = Field(default=None, description="Reason for the adjustment")


class UpdateMovementRequest(BaseModel):
    """Request to correct a recorded movement.

    Corrections rewrite the ledger entry only; product stock is not changed.
    """

    model_config = ConfigDict(allow_inf_nan=False)

    quantity: int | None = Field(default=None, description="Signed quantity")
    unit_price: float | None = Field(default=None, description="Sale price per unit")
    unit_cost: float | None = Field(default=None, description="Production unit cost")
    notes: str | None = Field(default=None, description="Additional notes")

