"""
Authorization dependencies for FastAPI
Role-gated access for mutating endpoints using stateless bearer tokens
"""

from typing import Any, Callable, Coroutine, Optional, Type

from fastapi import HTTPException, Request, Response, status
from fastapi.routing import APIRoute
from pydantic import BaseModel, ConfigDict

from app.core.config import config
from app.core.logger import logger
from app.models.claims import TokenClaims
from app.security.tokens import TokenVerificationError, verify_token

UNAUTHORIZED_DETAIL = "unauthorized"


class AuthDecision(BaseModel):
    """Outcome of an authorization check. `reason` is for logs only."""

    model_config = ConfigDict(frozen=True)

    allowed: bool
    status_code: int
    reason: str
    claims: Optional[TokenClaims] = None


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """
    Extract the credential from an Authorization header value.

    The scheme must match "Bearer" case-insensitively, followed by a single
    space and exactly one credential. Anything else yields None.
    """
    if not authorization:
        return None

    parts = authorization.split(" ", 1)
    if len(parts) != 2:
        return None

    scheme, credential = parts
    if scheme.lower() != "bearer":
        return None
    if not credential or any(ch.isspace() for ch in credential):
        return None
    return credential


def authorize(
    authorization: Optional[str],
    required_role: str,
    secret: Optional[str],
    algorithm: str = "HS256",
    leeway: int = 0,
) -> AuthDecision:
    """
    Decide whether a request may run an operation gated on `required_role`.

    No credential and any verification failure give 401; a verified token
    without the role gives 403.

    Raises:
        MissingSecretError: If the server has no secret configured
    """
    token = extract_bearer_token(authorization)
    if token is None:
        return AuthDecision(allowed=False, status_code=status.HTTP_401_UNAUTHORIZED, reason="no_credential")

    try:
        claims = verify_token(token, secret, algorithm=algorithm, leeway=leeway)
    except TokenVerificationError as e:
        return AuthDecision(allowed=False, status_code=status.HTTP_401_UNAUTHORIZED, reason=e.kind)

    if not claims.has_role(required_role):
        return AuthDecision(
            allowed=False,
            status_code=status.HTTP_403_FORBIDDEN,
            reason="missing_role",
            claims=claims,
        )

    return AuthDecision(allowed=True, status_code=status.HTTP_200_OK, reason="ok", claims=claims)


def enforce_role(authorization: Optional[str], role: str) -> TokenClaims:
    """
    Run the authorization decision and turn a denial into an HTTPException.

    Every credential failure produces the same 401 body and
    `WWW-Authenticate: Bearer` header; only the debug log names the reason.

    Returns:
        The verified claims when the token carries `role`
    """
    decision = authorize(
        authorization,
        role,
        config.jwt_secret,
        algorithm=config.jwt_algorithm,
        leeway=config.jwt_leeway,
    )

    if decision.allowed:
        return decision.claims

    logger.debug(
        f"Authorization denied: {decision.reason}",
        metadata={"event": "authorization_denied", "reason": decision.reason, "required_role": role}
    )

    if decision.status_code == status.HTTP_403_FORBIDDEN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"forbidden - {role} role required",
        )

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=UNAUTHORIZED_DETAIL,
        headers={"WWW-Authenticate": "Bearer"},
    )


class RoleGatedRoute(APIRoute):
    """
    APIRoute that authorizes the request before FastAPI reads the body or
    resolves any dependency, so a rejected caller never reaches validation.

    The verified claims are left on `request.state.claims`.
    """

    required_role: Optional[str] = None

    def get_route_handler(self) -> Callable[[Request], Coroutine[Any, Any, Response]]:
        route_handler = super().get_route_handler()
        required_role = self.required_role

        async def gated_route_handler(request: Request) -> Response:
            role = required_role or config.admin_role
            request.state.claims = enforce_role(request.headers.get("authorization"), role)
            return await route_handler(request)

        return gated_route_handler


def role_gated_route(role: Optional[str] = None) -> Type[RoleGatedRoute]:
    """
    Route class for an APIRouter whose every route requires `role`.

    Usage:
        admin_router = APIRouter(route_class=role_gated_route())

    Args:
        role: Role label the verified token must carry; defaults to ADMIN_ROLE
    """
    return type("RoleGatedRoute", (RoleGatedRoute,), {"required_role": role})
