"""
Read-mostly runtime settings published by the flag poller
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.core.config import config
from app.core.logger import normalize_level


def utc_now():
    return datetime.now(timezone.utc)


class FlagSnapshot(BaseModel):
    """Immutable view of the remote flags at one point in time"""

    model_config = ConfigDict(frozen=True)

    offline: bool = False
    log_level: str = "INFO"
    fetched_at: Optional[datetime] = Field(default=None)


class FlagStore:
    """
    Holds the current FlagSnapshot.

    Request handlers call current(); only the poller calls publish().
    Publishing swaps a single reference, so readers never see a
    half-updated snapshot and no lock is needed.
    """

    def __init__(self, initial: Optional[FlagSnapshot] = None):
        self._snapshot = initial or FlagSnapshot()

    def current(self) -> FlagSnapshot:
        return self._snapshot

    def publish(self, snapshot: FlagSnapshot) -> FlagSnapshot:
        previous = self._snapshot
        self._snapshot = snapshot
        return previous


flag_store = FlagStore(FlagSnapshot(log_level=normalize_level(config.log_level) or "INFO"))
