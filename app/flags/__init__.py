"""
Runtime feature flags: offline kill-switch and log verbosity
"""

from .store import FlagSnapshot, FlagStore, flag_store
from .source import DaprConfigurationSource, FlagSourceError
from .poller import FlagPoller

__all__ = [
    "FlagSnapshot",
    "FlagStore",
    "flag_store",
    "DaprConfigurationSource",
    "FlagSourceError",
    "FlagPoller",
]
