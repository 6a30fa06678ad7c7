"""
Utility helpers shared across the service
"""

from .correlation_id import get_correlation_id, set_correlation_id, new_correlation_id
from .pagination import clamp_limit, clamp_offset, DEFAULT_LIMIT, MAX_LIMIT, MAX_OFFSET

__all__ = [
    "get_correlation_id",
    "set_correlation_id",
    "new_correlation_id",
    "clamp_limit",
    "clamp_offset",
    "DEFAULT_LIMIT",
    "MAX_LIMIT",
    "MAX_OFFSET",
]
