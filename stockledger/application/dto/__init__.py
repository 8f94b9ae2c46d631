"""Data Transfer Objects for API layer.

Request DTOs: Validate and parse incoming API requests.
Response DTOs: Structure and serialize API responses.

These are the ONLY contracts between API handlers and use cases.
"""

from stockledger.application.dto.requests import (
    CreateProductRequest,
    RegisterAdjustmentRequest,
    RegisterProductionRequest,
    RegisterSaleRequest,
    UpdateMovementRequest,
    UpdateProductRequest,
)
from stockledger.application.dto.responses import (
    CategoryValueResponse,
    DatabaseHealthResponse,
    ErrorResponse,
    FinancialSummaryResponse,
    HealthResponse,
    ImportBackupResponse,
    MovementListResponse,
    MovementResponse,
    ProductListResponse,
    ProductProfitabilityResponse,
    ProductResponse,
    ProductSnapshotResponse,
    ProductStatsResponse,
    TransactionResponse,
)

__all__ = [
    # Requests
    "CreateProductRequest",
    "UpdateProductRequest",
    "RegisterSaleRequest",
    "RegisterProductionRequest",
    "RegisterAdjustmentRequest",
    "UpdateMovementRequest",
    # Responses
    "ProductResponse",
    "ProductListResponse",
    "ProductSnapshotResponse",
    "MovementResponse",
    "MovementListResponse",
    "TransactionResponse",
    "FinancialSummaryResponse",
    "ProductStatsResponse",
    "ProductProfitabilityResponse",
    "CategoryValueResponse",
    "ImportBackupResponse",
    "DatabaseHealthResponse",
    "HealthResponse",
    "ErrorResponse",
]
