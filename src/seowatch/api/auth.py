"""Bearer token authentication with read and write scopes."""

import hmac
from typing import Any

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..utils.logging import get_structured_logger
from .types import APIError

logger = get_structured_logger(__name__)

security = HTTPBearer()

READ = "read"
WRITE = "write"


class AuthError(APIError):
    """Authentication related errors."""

    pass


def setup_auth(app, settings) -> None:
    """Map every configured token to the permissions it grants.

    ``api_tokens`` may read and change state. ``api_read_tokens`` may only
    read schedules, results, alerts and the dashboard.
    """
    grants: dict[str, frozenset[str]] = {}
    for token in settings.api_read_tokens:
        grants[token] = frozenset({READ})
    for token in settings.api_tokens:
        grants[token] = frozenset({READ, WRITE})

    app.state.token_grants = grants
    logger.info(
        "API authentication configured",
        write_tokens=len(settings.api_tokens),
        read_tokens=len(settings.api_read_tokens),
    )


def verify_api_token(token: str, valid_tokens) -> bool:
    """Constant-time membership check against the configured tokens."""
    if not token:
        return False
    return any(hmac.compare_digest(token, candidate) for candidate in valid_tokens)


def resolve_permissions(token: str, grants: dict[str, frozenset[str]]) -> frozenset:
    for candidate, permissions in grants.items():
        if verify_api_token(token, [candidate]):
            return permissions
    raise AuthError("Invalid API token")


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> dict[str, Any]:
    """Resolve the caller and its permissions from the bearer token."""
    grants = getattr(request.app.state, "token_grants", {})

    try:
        permissions = resolve_permissions(credentials.credentials, grants)
    except AuthError:
        logger.warning("Rejected API token", path=request.url.path)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return {
        "id": "api-writer" if WRITE in permissions else "api-reader",
        "permissions": sorted(permissions),
    }


def require_permission(permission: str):
    """Dependency factory that requires a specific permission."""

    def permission_checker(
        current_user: dict[str, Any] = Depends(get_current_user)
    ) -> dict[str, Any]:
        if permission not in current_user["permissions"]:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Permission denied: requires '{permission}'",
            )
        return current_user

    return permission_checker
