"""
Pagination parameter clamping for list endpoints
"""

from typing import Optional, Union

DEFAULT_LIMIT = 20
MAX_LIMIT = 100
DEFAULT_OFFSET = 0
# OFFSET is bound as a bigint
MAX_OFFSET = 2**63 - 1


def _to_int(raw: Optional[Union[int, str]]) -> Optional[int]:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    try:
        return int(str(raw).strip())
    except ValueError:
        return None


def clamp_limit(raw: Optional[Union[int, str]]) -> int:
    """
    Clamp a caller-supplied page size into (0, MAX_LIMIT].

    Missing, non-numeric, zero, negative and oversized values all
    fall back to DEFAULT_LIMIT.
    """
    value = _to_int(raw)
    if value is None or value <= 0 or value > MAX_LIMIT:
        return DEFAULT_LIMIT
    return value


def clamp_offset(raw: Optional[Union[int, str]]) -> int:
    """Clamp a caller-supplied offset into [0, MAX_OFFSET], defaulting to 0"""
    value = _to_int(raw)
    if value is None or value < 0 or value > MAX_OFFSET:
        return DEFAULT_OFFSET
    return value
