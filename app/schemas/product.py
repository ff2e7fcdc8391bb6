from pydantic import BaseModel, Field, ConfigDict, StringConstraints, field_validator
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import Annotated, Optional

from app.models.product import MAX_INTEGER, NAME_MAX_LENGTH

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
# Keeps (page - 1) * limit inside an INTEGER bind parameter
MAX_PAGE = MAX_INTEGER // MAX_PAGE_SIZE

# Search terms are trimmed before the length check
SearchTerm = Annotated[str, StringConstraints(strip_whitespace=True, max_length=NAME_MAX_LENGTH)]


def reject_bool(value):
    """JSON true/false would otherwise be coerced to 1/0."""
    if isinstance(value, bool):
        raise ValueError("Input should be a number, not a boolean")
    return value


class ProductBase(BaseModel):
    """Base schema for Product with common attributes."""
    name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH, description="Product name")
    price: float = Field(..., ge=0, allow_inf_nan=False, description="Product price (must be non-negative)")
    stock: int = Field(..., ge=0, le=MAX_INTEGER, description="Available stock (must be non-negative)")

    model_config = ConfigDict(str_strip_whitespace=True)

    @field_validator("price", "stock", mode="before")
    @classmethod
    def numbers_not_bool(cls, value):
        return reject_bool(value)


class ProductCreate(ProductBase):
    """Schema for creating a new product."""
    pass


class ProductUpdate(BaseModel):
    """Schema for updating an existing product. All fields are optional."""
    name: Optional[str] = Field(None, min_length=1, max_length=NAME_MAX_LENGTH, description="Product name")
    price: Optional[float] = Field(None, ge=0, allow_inf_nan=False, description="Product price")
    stock: Optional[int] = Field(None, ge=0, le=MAX_INTEGER, description="Available stock")

    model_config = ConfigDict(str_strip_whitespace=True)

    @field_validator("price", "stock", mode="before")
    @classmethod
    def numbers_not_bool(cls, value):
        return reject_bool(value)

    @field_validator("name", "price", "stock")
    @classmethod
    def reject_null(cls, value):
        # Defaults are not validated, so this only fires on an explicit null
        if value is None:
            raise ValueError("Field may be omitted but not set to null")
        return value


class ProductResponse(ProductBase):
    """Schema for product response including all fields."""
    id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductQuery(BaseModel):
    """Listing options. Filters left as None add no predicate."""
    page: int = Field(1, ge=1, le=MAX_PAGE)
    limit: int = Field(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)
    search: Optional[SearchTerm] = None
    min_price: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    max_price: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    min_stock: Optional[int] = Field(None, ge=0, le=MAX_INTEGER)
    max_stock: Optional[int] = Field(None, ge=0, le=MAX_INTEGER)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int


class ProductListResponse(CamelModel):
    """Schema for paginated product list response."""
    data: list[ProductResponse]
    pagination: Pagination


class ProductMetrics(CamelModel):
    """Inventory report recomputed on every request."""
    total_products: int = 0
    total_inventory_value: float = 0
    average_price: float = 0
    min_price: float = 0
    max_price: float = 0
    low_stock_products: int = 0
    total_stock: int = 0
    low_stock_items: list[ProductResponse] = []
    most_expensive: list[ProductResponse] = []
    cheapest: list[ProductResponse] = []


class ProductDeleteResponse(BaseModel):
    message: str
    id: int
