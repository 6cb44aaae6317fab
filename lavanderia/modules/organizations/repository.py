# lavanderia/modules/organizations/repository.py
from typing import Optional

from fastapi import Depends
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING

from lavanderia.core.database import get_database
from lavanderia.core.repository import BaseRepository
from .models import MembershipInDB


class MembershipRepository(BaseRepository[MembershipInDB]):
    """Tabela de membresia user_id -> org_id."""

    model = MembershipInDB
    collection_name = "organizacion_miembros"

    async def is_member(self, user_id: str, org_id: str) -> bool:
        return await self.count({"org_id": org_id, "user_id": user_id}) >= 1

    async def first_org_for(self, user_id: str) -> Optional[str]:
        membership = await self.get_by({"user_id": user_id}, sort=[("created_at", ASCENDING)])
        return membership.org_id if membership else None


async def get_membership_repository(db: AsyncIOMotorDatabase = Depends(get_database)) -> MembershipRepository:
    return MembershipRepository(db)
