"""
Background refresh of runtime flags
"""

import asyncio
from typing import Callable, Optional

from app.core.logger import logger, normalize_level
from app.core.telemetry import get_tracer
from app.flags.source import (
    LOG_LEVEL_KEY,
    OFFLINE_KEY,
    DaprConfigurationSource,
    FlagSourceError,
    parse_bool,
)
from app.flags.store import FlagSnapshot, FlagStore, utc_now


class FlagPoller:
    """
    Single owner of the FlagStore.

    Polls the source on a fixed interval, publishes a fresh snapshot and
    applies log level changes. Source failures keep the last-known snapshot
    and are logged as warnings.
    """

    def __init__(
        self,
        source: DaprConfigurationSource,
        store: FlagStore,
        interval: float,
        apply_log_level: Optional[Callable[[str], bool]] = None,
    ):
        self.source = source
        self.store = store
        self.interval = interval
        self.apply_log_level = apply_log_level or logger.set_level
        self._task: Optional[asyncio.Task] = None

    def _merge(self, previous: FlagSnapshot, values: dict) -> FlagSnapshot:
        offline = previous.offline
        if OFFLINE_KEY in values:
            parsed = parse_bool(values[OFFLINE_KEY])
            if parsed is None:
                logger.warning(
                    f"Ignoring non-boolean value for flag '{OFFLINE_KEY}'",
                    metadata={"event": "flag_value_invalid", "key": OFFLINE_KEY}
                )
            else:
                offline = parsed

        log_level = previous.log_level
        raw_level = values.get(LOG_LEVEL_KEY)
        if raw_level:
            normalized = normalize_level(raw_level)
            if normalized is None:
                logger.warning(
                    f"Ignoring unknown value for flag '{LOG_LEVEL_KEY}'",
                    metadata={"event": "flag_value_invalid", "key": LOG_LEVEL_KEY, "value": str(raw_level)}
                )
            else:
                log_level = normalized

        return FlagSnapshot(offline=offline, log_level=log_level, fetched_at=utc_now())

    async def refresh(self) -> FlagSnapshot:
        """Fetch once and publish; returns the snapshot in effect afterwards"""
        with get_tracer().start_as_current_span("flags.refresh") as span:
            snapshot = await self._refresh()
            span.set_attribute("flags.offline", snapshot.offline)
            span.set_attribute("flags.log_level", snapshot.log_level)
            return snapshot

    async def _refresh(self) -> FlagSnapshot:
        previous = self.store.current()
        try:
            values = await self.source.fetch()
        except FlagSourceError as e:
            logger.warning(
                f"Feature flag refresh failed, keeping last-known values: {e}",
                metadata={"event": "flags_refresh_failed", "offline": previous.offline, "log_level": previous.log_level}
            )
            return previous

        snapshot = self._merge(previous, values)
        self.store.publish(snapshot)

        if snapshot.log_level != previous.log_level:
            if self.apply_log_level(snapshot.log_level):
                logger.info(
                    f"Log level changed to {snapshot.log_level}",
                    metadata={"event": "log_level_changed", "previous": previous.log_level}
                )

        if snapshot.offline != previous.offline:
            logger.warning(
                f"Offline flag is now {'ON' if snapshot.offline else 'OFF'}",
                metadata={"event": "offline_flag_changed", "offline": snapshot.offline}
            )

        return snapshot

    async def run(self):
        """Poll until cancelled"""
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.refresh()
            except Exception as e:
                logger.error(f"Unexpected error in flag poller: {e}", error=e)

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run(), name="flag-poller")
        return self._task

    async def stop(self):
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
