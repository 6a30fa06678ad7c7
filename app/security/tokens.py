"""
Bearer token verification

Verifies compact HMAC-signed JWTs against the server secret and returns
the claims the authorization gate needs. Every failure is a subclass of
TokenVerificationError so callers can answer uniformly while logs keep
the specific kind.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

import jwt

from app.core.config import MissingSecretError
from app.models.claims import TokenClaims

DEFAULT_ALGORITHM = "HS256"


class TokenVerificationError(Exception):
    """Base class for every reason a token is rejected"""

    kind = "invalid"

    def __init__(self, message: str = "invalid token"):
        self.message = message
        super().__init__(message)


class MalformedTokenError(TokenVerificationError):
    kind = "malformed"


class AlgorithmMismatchError(TokenVerificationError):
    kind = "algorithm_mismatch"


class SignatureMismatchError(TokenVerificationError):
    kind = "signature_mismatch"


class TokenExpiredError(TokenVerificationError):
    kind = "expired"


class TokenNotYetValidError(TokenVerificationError):
    kind = "not_yet_valid"


def _timestamp(payload: Dict[str, Any], claim: str) -> Optional[datetime]:
    value = payload.get(claim)
    if value is None:
        return None
    return datetime.fromtimestamp(value, tz=timezone.utc)


def _roles(payload: Dict[str, Any]) -> frozenset:
    roles = payload.get("roles", [])
    if roles is None:
        return frozenset()
    if not isinstance(roles, list) or not all(isinstance(r, str) for r in roles):
        raise MalformedTokenError("roles claim must be a list of strings")
    return frozenset(roles)


def verify_token(
    token: str,
    secret: Optional[str],
    algorithm: str = DEFAULT_ALGORITHM,
    leeway: int = 0,
) -> TokenClaims:
    """
    Verify a signed token and return its claims.

    Args:
        token: Compact JWT string (header.payload.signature)
        secret: Shared HMAC secret
        algorithm: The only signing algorithm accepted
        leeway: Clock skew tolerance in seconds for exp/nbf/iat

    Returns:
        TokenClaims with the role set and registered claims

    Raises:
        MissingSecretError: If no secret is configured
        TokenVerificationError: If the token must be rejected
    """
    if not secret:
        raise MissingSecretError()

    if not token or not isinstance(token, str):
        raise MalformedTokenError("empty token")

    try:
        header = jwt.get_unverified_header(token)
    except jwt.InvalidTokenError as e:
        raise MalformedTokenError(f"unreadable header: {e}")

    declared = header.get("alg")
    if declared != algorithm:
        raise AlgorithmMismatchError(f"unexpected signing method: {declared}")

    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            leeway=leeway,
            options={"verify_aud": False},
        )
    except jwt.InvalidSignatureError as e:
        raise SignatureMismatchError(str(e))
    except jwt.ExpiredSignatureError as e:
        raise TokenExpiredError(str(e))
    except jwt.ImmatureSignatureError as e:
        raise TokenNotYetValidError(str(e))
    except jwt.InvalidAlgorithmError as e:
        raise AlgorithmMismatchError(str(e))
    except jwt.InvalidTokenError as e:
        raise MalformedTokenError(str(e))

    try:
        return TokenClaims(
            subject=payload.get("sub"),
            roles=_roles(payload),
            expires_at=_timestamp(payload, "exp"),
            issued_at=_timestamp(payload, "iat"),
            not_before=_timestamp(payload, "nbf"),
        )
    except (TypeError, ValueError, OverflowError) as e:
        raise MalformedTokenError(f"invalid registered claim: {e}")
