# lavanderia/modules/categories/repository.py
from typing import Dict, List, Optional

from fastapi import Depends
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING

from lavanderia.core.database import get_database
from lavanderia.core.repository import OrgScopedRepository
from .models import CategoryInDB


class CategoryRepository(OrgScopedRepository[CategoryInDB]):
    model = CategoryInDB
    collection_name = "categorias"

    async def list_sorted(self, org_id: str, tipo: Optional[str] = None) -> List[CategoryInDB]:
        query = {"tipo": tipo} if tipo else {}
        return await self.list_for_org(org_id, query, sort=[("nombre", ASCENDING)])

    async def name_map(self, org_id: str) -> Dict[str, str]:
        """id -> nombre de todas as categorias da organização."""
        return {c.id: c.nombre for c in await self.list_for_org(org_id)}


async def get_category_repository(db: AsyncIOMotorDatabase = Depends(get_database)) -> CategoryRepository:
    return CategoryRepository(db)
