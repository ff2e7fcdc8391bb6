from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session
from typing import Annotated, Optional

from app.database import get_db
from app.models.product import MAX_INTEGER
from app.services.product_service import ProductService
from app.schemas.error import ErrorResponse
from app.schemas.product import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE,
    MAX_PAGE_SIZE,
    SearchTerm,
    Pagination,
    ProductCreate,
    ProductDeleteResponse,
    ProductListResponse,
    ProductMetrics,
    ProductQuery,
    ProductResponse,
    ProductUpdate,
)
from app.utils.errors import ProductNotFoundError

router = APIRouter(prefix="/products", tags=["Products"])

BAD_REQUEST = {status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse, "description": "Validation error"}}
NOT_FOUND = {status.HTTP_404_NOT_FOUND: {"model": ErrorResponse, "description": "Product not found"}}

# Anything larger cannot be bound as an INTEGER parameter
ProductId = Annotated[int, Path(ge=1, le=MAX_INTEGER, description="Product ID")]


def product_query(
    page: int = Query(1, ge=1, le=MAX_PAGE, description="Page number"),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Items per page"),
    search: Optional[SearchTerm] = Query(None, description="Substring of the product name"),
    min_price: Optional[float] = Query(None, alias="minPrice", ge=0, allow_inf_nan=False, description="Minimum price (inclusive)"),
    max_price: Optional[float] = Query(None, alias="maxPrice", ge=0, allow_inf_nan=False, description="Maximum price (inclusive)"),
    min_stock: Optional[int] = Query(None, alias="minStock", ge=0, le=MAX_INTEGER, description="Minimum stock (inclusive)"),
    max_stock: Optional[int] = Query(None, alias="maxStock", ge=0, le=MAX_INTEGER, description="Maximum stock (inclusive)"),
) -> ProductQuery:
    """Validated query string, collected into listing options."""
    return ProductQuery(
        page=page,
        limit=limit,
        search=search or None,
        min_price=min_price,
        max_price=max_price,
        min_stock=min_stock,
        max_stock=max_stock,
    )


@router.get(
    "",
    response_model=ProductListResponse,
    responses=BAD_REQUEST,
    summary="List products",
    description="Get a paginated list of products, newest first, with optional name search and price/stock ranges."
)
def list_products(
    options: ProductQuery = Depends(product_query),
    db: Session = Depends(get_db)
):
    """
    Get paginated list of products.

    All supplied filters must match. An inverted range (min > max) is
    accepted and simply matches nothing.
    """
    service = ProductService(db)
    products, total, total_pages = service.get_all(options)

    return ProductListResponse(
        data=[ProductResponse.model_validate(p) for p in products],
        pagination=Pagination(
            page=options.page,
            limit=options.limit,
            total=total,
            total_pages=total_pages
        )
    )


@router.get(
    "/metrics",
    response_model=ProductMetrics,
    summary="Inventory metrics",
    description="Totals, price statistics and top-N lists computed over every product."
)
def get_metrics(db: Session = Depends(get_db)):
    """Get the inventory metrics report."""
    service = ProductService(db)
    return ProductMetrics.model_validate(service.compute_metrics(), from_attributes=True)


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    responses=NOT_FOUND,
    summary="Get product by ID",
    description="Get detailed information about a specific product."
)
def get_product(
    product_id: ProductId,
    db: Session = Depends(get_db)
):
    """Get a product by ID."""
    service = ProductService(db)
    product = service.get_by_id(product_id)

    if not product:
        raise ProductNotFoundError(product_id)

    return product


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    responses=BAD_REQUEST,
    summary="Create a new product",
    description="Create a new product with name, price, and initial stock."
)
def create_product(
    product_data: ProductCreate,
    db: Session = Depends(get_db)
):
    """
    Create a new product.

    - **name**: Product name, 1-255 characters after trimming (required)
    - **price**: Product price, must be non-negative (required)
    - **stock**: Initial stock quantity, must be a non-negative integer (required)
    """
    service = ProductService(db)
    return service.create(product_data)


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    responses={**BAD_REQUEST, **NOT_FOUND},
    summary="Update a product",
    description="Update product details. Only provided fields will be updated."
)
def update_product(
    product_id: ProductId,
    product_data: ProductUpdate,
    db: Session = Depends(get_db)
):
    """
    Update a product.

    Partial updates are supported - only include fields you want to change.
    An empty body leaves the product untouched and returns it.
    """
    service = ProductService(db)
    product = service.update(product_id, product_data)

    if not product:
        raise ProductNotFoundError(product_id)

    return product


@router.delete(
    "/{product_id}",
    response_model=ProductDeleteResponse,
    responses=NOT_FOUND,
    summary="Delete a product",
    description="Permanently delete a product by ID."
)
def delete_product(
    product_id: ProductId,
    db: Session = Depends(get_db)
):
    """Delete a product."""
    service = ProductService(db)
    deleted = service.delete(product_id)

    if not deleted:
        raise ProductNotFoundError(product_id)

    return ProductDeleteResponse(message="Product deleted successfully", id=product_id)
