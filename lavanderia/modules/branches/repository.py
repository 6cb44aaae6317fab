# lavanderia/modules/branches/repository.py
import re
from typing import Any, Dict, List, Optional

from fastapi import Depends
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING

from lavanderia.core.database import get_database
from lavanderia.core.repository import OrgScopedRepository
from .models import BranchInDB


class BranchRepository(OrgScopedRepository[BranchInDB]):
    model = BranchInDB
    collection_name = "sucursales"

    async def search(
        self,
        org_id: str,
        activo: Optional[bool] = None,
        q: Optional[str] = None,
        skip: int = 0,
        limit: int = 0,
    ) -> List[BranchInDB]:
        query: Dict[str, Any] = {}
        if activo is not None:
            query["activo"] = activo
        if q:
            query["nombre"] = {"$regex": re.escape(q), "$options": "i"}
        return await self.list_for_org(org_id, query, skip=skip, limit=limit, sort=[("nombre", ASCENDING)])

    async def name_map(self, org_id: str) -> Dict[str, str]:
        """id -> nombre de todas as sucursais da organização."""
        return {b.id: b.nombre for b in await self.list_for_org(org_id)}


async def get_branch_repository(db: AsyncIOMotorDatabase = Depends(get_database)) -> BranchRepository:
    return BranchRepository(db)
