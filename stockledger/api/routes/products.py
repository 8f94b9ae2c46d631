"""Product management endpoints."""

from fastapi import APIRouter, Depends, Query, status

from stockledger.api.dependencies import get_app_settings, get_products
from stockledger.application.dto.requests import CreateProductRequest, UpdateProductRequest
from stockledger.application.dto.responses import (
    ErrorResponse,
    ProductListResponse,
    ProductResponse,
)
from stockledger.application.use_cases import ManageProductsUseCase
from stockledger.config import Settings

router = APIRouter(prefix="/api/products", tags=["products"])


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def create_product(
    request: CreateProductRequest,
    use_case: ManageProductsUseCase = Depends(get_products),
    settings: Settings = Depends(get_app_settings),
) -> ProductResponse:
    """Create a product with its opening stock."""
    product = await use_case.create(
        name=request.name,
        category=request.category,
        quantity=request.quantity,
        price=request.price,
        initial_cost=request.initial_cost,
        notes=request.notes,
    )
    return ProductResponse.from_entity(product, settings.ledger.low_stock_threshold)


@router.get("", response_model=ProductListResponse)
async def list_products(
    category: str | None = Query(default=None, description="Filter by category"),
    q: str | None = Query(default=None, description="Search name, category and notes"),
    use_case: ManageProductsUseCase = Depends(get_products),
    settings: Settings = Depends(get_app_settings),
) -> ProductListResponse:
    """List products sorted by name."""
    if q:
        products = await use_case.search(q)
        if category is not None:
            products = [p for p in products if p.category == category]
    else:
        products = await use_case.list_products(category=category)

    threshold = settings.ledger.low_stock_threshold
    return ProductListResponse(
        products=[ProductResponse.from_entity(p, threshold) for p in products],
        total=len(products),
    )


@router.get("/categories", response_model=list[str])
async def list_categories(
    use_case: ManageProductsUseCase = Depends(get_products),
) -> list[str]:
    """Suggested categories plus custom ones in use."""
    return await use_case.categories()


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_product(
    product_id: str,
    use_case: ManageProductsUseCase = Depends(get_products),
    settings: Settings = Depends(get_app_settings),
) -> ProductResponse:
    product = await use_case.get(product_id)
    return ProductResponse.from_entity(product, settings.ledger.low_stock_threshold)


@router.patch(
    "/{product_id}",
    response_model=ProductResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_product(
    product_id: str,
    request: UpdateProductRequest,
    use_case: ManageProductsUseCase = Depends(get_products),
    settings: Settings = Depends(get_app_settings),
) -> ProductResponse:
    """Edit descriptive fields. Stock changes go through /api/movements."""
    # Only notes can be cleared; a null name/category/price means "unchanged"
    changes = {
        k: v
        for k, v in request.model_dump(exclude_unset=True).items()
        if v is not None or k == "notes"
    }
    product = await use_case.update(product_id, **changes)
    return ProductResponse.from_entity(product, settings.ledger.low_stock_threshold)


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_product(
    product_id: str,
    use_case: ManageProductsUseCase = Depends(get_products),
) -> None:
    """Delete a product and its photos. Its movements are kept."""
    await use_case.delete(product_id)
