# lavanderia/modules/auth/routers.py
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from loguru import logger
from pydantic import BaseModel

from lavanderia.core.exceptions import BadRequest, StoreError
from lavanderia.modules.organizations.repository import MembershipRepository, get_membership_repository
from lavanderia.services.identity_service import IdentityService, get_identity_service

auth_router = APIRouter()


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class LoginResponse(BaseModel):
    access_token: Optional[str] = None
    user: Dict[str, Any]
    org_id: Optional[str] = None


@auth_router.post("/login", response_model=LoginResponse, summary="Sign in with email and password", tags=["Auth"])
async def login_endpoint(
    payload: Optional[LoginRequest] = None,
    identity: IdentityService = Depends(get_identity_service),
    membership_repo: MembershipRepository = Depends(get_membership_repository),
):
    email = (payload.email or "").strip() if payload else ""
    password = payload.password if payload else None
    if not email or not password:
        raise BadRequest("email y password requeridos")

    result = await identity.sign_in(email, password)

    org_id = None
    user_id = result.user.get("id")
    if user_id:
        # Sem organização o login segue; o front pede org_id depois
        try:
            org_id = await membership_repo.first_org_for(user_id)
        except StoreError as e:
            logger.bind(user_id=user_id).error(f"Could not resolve org for user: {e}")

    return LoginResponse(access_token=result.access_token, user=result.user, org_id=org_id)
