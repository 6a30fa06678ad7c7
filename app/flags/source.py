"""
Flag source backed by the Dapr configuration API
"""

import asyncio
from typing import Any, Dict, Optional

import aiohttp

from app.core.config import config
from app.core.logger import logger

OFFLINE_KEY = "offline"
LOG_LEVEL_KEY = "log_level"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class FlagSourceError(Exception):
    """Raised when the flag source cannot be read"""


def parse_bool(value: Any) -> Optional[bool]:
    """Interpret a configuration value as a boolean; None if it is not one"""
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    return None


class DaprConfigurationSource:
    """
    Reads the `offline` and `log_level` keys from a Dapr configuration store.

    GET {dapr}/v1.0/configuration/{store}?key=offline&key=log_level answers
    with {"offline": {"value": "true", "version": "3"}, ...}; keys the store
    does not hold are simply absent.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        store_name: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.base_url = (base_url or config.dapr_base_url).rstrip("/")
        self.store_name = store_name or config.flags_store_name
        self.timeout = timeout or config.flags_timeout

    @property
    def url(self) -> str:
        return f"{self.base_url}/v1.0/configuration/{self.store_name}"

    async def fetch(self) -> Dict[str, str]:
        """
        Fetch the raw flag values.

        Returns:
            Mapping of key to string value for the keys present in the store

        Raises:
            FlagSourceError: If the sidecar is unreachable or answers badly
        """
        params = [("key", OFFLINE_KEY), ("key", LOG_LEVEL_KEY)]
        try:
            async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout)) as session:
                async with session.get(self.url, params=params) as response:
                    if response.status >= 400:
                        body = await response.text()
                        raise FlagSourceError(f"flag source returned {response.status}: {body[:200]}")
                    payload = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise FlagSourceError(f"flag source unreachable: {e}") from e
        except ValueError as e:
            raise FlagSourceError(f"flag source sent invalid JSON: {e}") from e

        if not isinstance(payload, dict):
            raise FlagSourceError("flag source payload is not an object")

        values = {}
        for key, item in payload.items():
            if isinstance(item, dict) and "value" in item:
                values[key] = item["value"]
            elif isinstance(item, (str, bool)):
                values[key] = item

        logger.debug(
            "Fetched feature flags",
            metadata={"event": "flags_fetched", "keys": sorted(values)}
        )
        return values
