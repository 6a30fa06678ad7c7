"""
Product model as stored in the catalog
"""

import math
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class Product(BaseModel):
    """Product row materialized from catalog.products"""

    id: str
    name: str
    description: str = ""
    price: float
    primary_image_url: str = ""
    images: List[str] = Field(default_factory=list)
    category: str = ""
    sku: str
    stock_count: int = 0
    tags: List[str] = Field(default_factory=list)
    rating: Optional[float] = None
    review_count: int = 0
    created_at: datetime
    updated_at: datetime

    @field_validator("images", "tags", mode="before")
    @classmethod
    def _coalesce_null_list(cls, value):
        return [] if value is None else list(value)

    @field_validator("rating")
    @classmethod
    def _finite_rating(cls, value):
        if value is not None and not math.isfinite(value):
            return None
        return value
