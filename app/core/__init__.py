"""
Core module initialization
"""

from .config import config, Config, ConfigurationError, MissingSecretError, validate_config
from .errors import ErrorResponse, ErrorResponseModel, DatabaseError
from .logger import logger

__all__ = [
    "config",
    "Config",
    "ConfigurationError",
    "MissingSecretError",
    "validate_config",
    "ErrorResponse",
    "ErrorResponseModel",
    "DatabaseError",
    "logger",
]
