"""
Dependencies module initialization
"""

from .auth import RoleGatedRoute, authorize, enforce_role, extract_bearer_token, role_gated_route
from .product import get_db_pool, get_product_repository, get_product_service

__all__ = [
    "authorize",
    "extract_bearer_token",
    "enforce_role",
    "role_gated_route",
    "RoleGatedRoute",
    "get_db_pool",
    "get_product_repository",
    "get_product_service",
]
