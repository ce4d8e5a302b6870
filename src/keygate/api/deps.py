"""FastAPI dependency injection."""

from __future__ import annotations

from fastapi import HTTPException, Request

from keygate.auth.principal import AuthenticatedPrincipal

__all__ = ["get_current_principal"]


async def get_current_principal(request: Request) -> AuthenticatedPrincipal:
    """Return the principal installed by ApiKeyAuthenticationMiddleware.

    Raises:
        HTTPException 401: no principal was established for this request.
    """
    principal = getattr(request.state, "principal", None)
    if not isinstance(principal, AuthenticatedPrincipal):
        raise HTTPException(
            status_code=401,
            detail="No authenticated principal available",
        )
    return principal
