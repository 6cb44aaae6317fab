# lavanderia/core/security.py

from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from loguru import logger
from pydantic import BaseModel

from lavanderia.core.config import Settings, get_settings
from lavanderia.core.exceptions import BadRequest, Forbidden, StoreError, Unauthenticated
from lavanderia.modules.organizations.repository import MembershipRepository, get_membership_repository
from lavanderia.services.identity_service import AuthenticatedUser, IdentityService, get_identity_service

bearer_scheme = HTTPBearer(auto_error=False)


class OrgContext(BaseModel):
    """Organização resolvida e validada pelo guard, vinculada à requisição."""

    org_id: str
    user: AuthenticatedUser


async def get_current_user(
    request: Request,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
    identity: Annotated[IdentityService, Depends(get_identity_service)],
) -> AuthenticatedUser:
    """
    Dependência FastAPI: extrai o bearer token e o valida no provedor de identidade.
    Levanta Unauthenticated (401) se ausente ou rejeitado.
    """
    token = credentials.credentials if credentials and credentials.scheme.lower() == "bearer" else ""
    if not token:
        raise Unauthenticated("No token")

    user = await identity.verify(token)
    request.state.user = user
    logger.debug(f"Authenticated user {user.user_id}")
    return user


CurrentUser = Annotated[AuthenticatedUser, Depends(get_current_user)]


async def resolve_org_id(request: Request, settings: Settings) -> Optional[str]:
    """org_id explícito (query, depois corpo JSON), senão o DEFAULT_ORG_ID configurado."""
    org_id = request.query_params.get("org_id")
    if not org_id and request.method in ("POST", "PUT", "PATCH"):
        if request.headers.get("content-type", "").startswith("application/json"):
            try:
                body = await request.json()
            except ValueError:
                body = None
            if isinstance(body, dict) and body.get("org_id"):
                org_id = str(body["org_id"])
    if not org_id:
        org_id = settings.DEFAULT_ORG_ID
    return org_id.strip() if org_id and org_id.strip() else None


async def require_membership(
    request: Request,
    user: CurrentUser,
    membership_repo: Annotated[MembershipRepository, Depends(get_membership_repository)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> OrgContext:
    """
    Dependência FastAPI: garante que o usuário autenticado pertence à organização.
    O org_id vinculado aqui é o único usado pelos handlers para filtrar e gravar.
    """
    org_id = await resolve_org_id(request, settings)
    if not org_id:
        raise BadRequest("org_id requerido")
    if not user or not user.user_id:
        raise Unauthenticated("No user")

    log = logger.bind(service="MembershipGuard", user_id=user.user_id, org_id=org_id)
    try:
        is_member = await membership_repo.is_member(user.user_id, org_id)
    except StoreError:
        log.error("Membership lookup failed.")
        raise
    if not is_member:
        log.warning("User is not a member of the organization.")
        raise Forbidden("Sin membresía en la organización")

    request.state.org_id = org_id
    return OrgContext(org_id=org_id, user=user)


CurrentOrg = Annotated[OrgContext, Depends(require_membership)]
