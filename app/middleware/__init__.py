"""
Middleware modules for the Product Catalog Service
"""

from .offline import OfflineMiddleware
from .request_context import RequestContextMiddleware

__all__ = ["OfflineMiddleware", "RequestContextMiddleware"]
