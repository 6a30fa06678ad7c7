"""
Schemas module initialization
"""

from .product import ProductCreate, ProductListResponse, ProductUpdate

__all__ = [
    "ProductCreate",
    "ProductListResponse",
    "ProductUpdate",
]
