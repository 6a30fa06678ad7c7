"""
Verified token claims for authorization checks
"""

from datetime import datetime
from typing import FrozenSet, Optional

from pydantic import BaseModel, ConfigDict


class TokenClaims(BaseModel):
    """Claims of a verified bearer token. Lives for one request only."""

    model_config = ConfigDict(frozen=True)

    subject: Optional[str] = None
    roles: FrozenSet[str] = frozenset()
    expires_at: Optional[datetime] = None
    issued_at: Optional[datetime] = None
    not_before: Optional[datetime] = None

    def has_role(self, role: str) -> bool:
        """Exact, case-sensitive role membership"""
        return role in self.roles
