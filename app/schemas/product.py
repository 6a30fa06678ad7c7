"""
API schemas for Product endpoints
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from app.models.product import Product

# catalog.products.stock_count is a 32-bit INTEGER
STOCK_MIN = -2**31
STOCK_MAX = 2**31 - 1


class ProductCreate(BaseModel):
    """Schema for creating a new product"""
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field("", max_length=2000)
    price: float = Field(..., gt=0, allow_inf_nan=False)
    primary_image_url: str = ""
    images: List[str] = []
    category: str = Field("", max_length=100)
    sku: str = Field(..., min_length=1, max_length=64)
    stock_count: int = Field(0, ge=STOCK_MIN, le=STOCK_MAX)
    tags: List[str] = []


class ProductUpdate(BaseModel):
    """
    Schema for partially updating a product.

    A field counts as provided only when the request set it to a non-null
    value. An explicit empty list is provided and clears the column.
    """
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    price: Optional[float] = Field(None, gt=0, allow_inf_nan=False)
    primary_image_url: Optional[str] = None
    images: Optional[List[str]] = None
    category: Optional[str] = Field(None, max_length=100)
    sku: Optional[str] = Field(None, min_length=1, max_length=64)
    stock_count: Optional[int] = Field(None, ge=STOCK_MIN, le=STOCK_MAX)
    tags: Optional[List[str]] = None

    def provided_fields(self) -> Dict[str, Any]:
        """Fields explicitly set in the request, by name"""
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if getattr(self, name) is not None
        }


class ProductListResponse(BaseModel):
    """List response with pagination metadata"""
    products: List[Product]
    total: int
    limit: int
    offset: int
