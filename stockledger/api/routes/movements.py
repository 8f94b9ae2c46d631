"""Movement (inventory ledger) endpoints."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query, status

from stockledger.api.dependencies import get_app_settings, get_coordinator
from stockledger.application.dto.requests import (
    RegisterAdjustmentRequest,
    RegisterProductionRequest,
    RegisterSaleRequest,
    UpdateMovementRequest,
)
from stockledger.application.dto.responses import (
    ErrorResponse,
    MovementListResponse,
    MovementResponse,
    ProductResponse,
    TransactionResponse,
)
from stockledger.application.use_cases import TransactionCoordinator, TransactionResult
from stockledger.config import Settings
from stockledger.core.entities import MovementFilters, MovementType

router = APIRouter(prefix="/api/movements", tags=["movements"])

_EVENT_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}


def _to_response(result: TransactionResult, settings: Settings) -> TransactionResponse:
    return TransactionResponse(
        product=ProductResponse.from_entity(
            result.product, settings.ledger.low_stock_threshold
        ),
        movement=MovementResponse.from_entity(result.movement),
    )


@router.post(
    "/sale",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_EVENT_RESPONSES,
)
async def register_sale(
    request: RegisterSaleRequest,
    coordinator: TransactionCoordinator = Depends(get_coordinator),
    settings: Settings = Depends(get_app_settings),
) -> TransactionResponse:
    """Register a sale. Stock decreases, average cost is unchanged."""
    result = await coordinator.register_sale(
        request.product_id,
        request.quantity,
        unit_price=request.unit_price,
        notes=request.notes,
    )
    return _to_response(result, settings)


@router.post(
    "/production",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_EVENT_RESPONSES,
)
async def register_production(
    request: RegisterProductionRequest,
    coordinator: TransactionCoordinator = Depends(get_coordinator),
    settings: Settings = Depends(get_app_settings),
) -> TransactionResponse:
    """Register a production run with moving-average cost recalculation."""
    result = await coordinator.register_production(
        request.product_id,
        request.quantity,
        request.unit_cost,
        notes=request.notes,
    )
    return _to_response(result, settings)


@router.post(
    "/adjustment",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_EVENT_RESPONSES,
)
async def register_adjustment(
    request: RegisterAdjustmentRequest,
    coordinator: TransactionCoordinator = Depends(get_coordinator),
    settings: Settings = Depends(get_app_settings),
) -> TransactionResponse:
    """Register a manual stock correction."""
    result = await coordinator.register_adjustment(
        request.product_id,
        request.delta,
        notes=request.notes,
    )
    return _to_response(result, settings)


@router.get("", response_model=MovementListResponse)
async def list_movements(
    product_id: str | None = Query(default=None),
    type: MovementType | None = Query(default=None),
    start_date: datetime | None = Query(default=None),
    end_date: datetime | None = Query(default=None),
    limit: int | None = Query(default=None, ge=1),
    coordinator: TransactionCoordinator = Depends(get_coordinator),
) -> MovementListResponse:
    """List movements newest first."""
    movements = await coordinator.list_movements(
        MovementFilters(
            product_id=product_id,
            type=type,
            start_date=start_date,
            end_date=end_date,
        )
    )
    if limit is not None:
        movements = movements[:limit]
    return MovementListResponse(
        movements=[MovementResponse.from_entity(m) for m in movements],
        total=len(movements),
    )


@router.get("/recent", response_model=MovementListResponse)
async def recent_movements(
    limit: int | None = Query(default=None, ge=1, le=100),
    coordinator: TransactionCoordinator = Depends(get_coordinator),
    settings: Settings = Depends(get_app_settings),
) -> MovementListResponse:
    """Latest movements for the dashboard feed."""
    movements = await coordinator.recent_movements(limit or settings.ledger.recent_movements_limit)
    return MovementListResponse(
        movements=[MovementResponse.from_entity(m) for m in movements],
        total=len(movements),
    )


@router.get(
    "/{movement_id}",
    response_model=MovementResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_movement(
    movement_id: str,
    coordinator: TransactionCoordinator = Depends(get_coordinator),
) -> MovementResponse:
    return MovementResponse.from_entity(await coordinator.get_movement(movement_id))


@router.patch(
    "/{movement_id}",
    response_model=MovementResponse,
    responses={404: {"model": ErrorResponse}},
)
async def update_movement(
    movement_id: str,
    request: UpdateMovementRequest,
    coordinator: TransactionCoordinator = Depends(get_coordinator),
) -> MovementResponse:
    """Correct a movement. Product stock is not recalculated."""
    changes = {
        k: v
        for k, v in request.model_dump(exclude_unset=True).items()
        if v is not None or k == "notes"
    }
    movement = await coordinator.update_movement(movement_id, **changes)
    return MovementResponse.from_entity(movement)


@router.delete(
    "/{movement_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_movement(
    movement_id: str,
    coordinator: TransactionCoordinator = Depends(get_coordinator),
) -> None:
    """Delete a movement. Product stock is not restored."""
    await coordinator.delete_movement(movement_id)
