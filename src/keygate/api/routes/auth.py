"""API key login endpoint."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from keygate.api.deps import get_current_principal
from keygate.api.schemas import UserResponse
from keygate.auth.principal import AuthenticatedPrincipal
from keygate.config import settings

router = APIRouter(tags=["auth"])

PrincipalDep = Annotated[AuthenticatedPrincipal, Depends(get_current_principal)]


@router.api_route(settings.api_key_login_path, methods=[settings.api_key_login_method])
async def authenticate_by_api_key(principal: PrincipalDep) -> UserResponse:
    """Return the user behind the API key in the ``X-API-Key`` header.

    The key itself is checked by ApiKeyAuthenticationMiddleware before
    this handler runs.
    """
    return UserResponse.model_validate(principal.user)
