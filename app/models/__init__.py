"""
Models module initialization
"""

from .product import Product
from .claims import TokenClaims

__all__ = [
    "Product",
    "TokenClaims",
]
