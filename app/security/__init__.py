"""
Security package: bearer token verification
"""

from .tokens import (
    AlgorithmMismatchError,
    MalformedTokenError,
    SignatureMismatchError,
    TokenExpiredError,
    TokenNotYetValidError,
    TokenVerificationError,
    verify_token,
)

__all__ = [
    "AlgorithmMismatchError",
    "MalformedTokenError",
    "SignatureMismatchError",
    "TokenExpiredError",
    "TokenNotYetValidError",
    "TokenVerificationError",
    "verify_token",
]
