# lavanderia/modules/movements/repository.py
from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import Depends
from loguru import logger
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING
from pymongo.results import UpdateResult

from lavanderia.core.database import get_database
from lavanderia.core.repository import OrgScopedRepository, utcnow
from .models import MovementInDB


def date_range_query(desde: Optional[date] = None, hasta: Optional[date] = None) -> Dict[str, Any]:
    """Filtro inclusivo sobre `fecha` (datas gravadas como YYYY-MM-DD, comparáveis como string)."""
    bounds: Dict[str, str] = {}
    if desde is not None:
        bounds["$gte"] = desde.isoformat()
    if hasta is not None:
        bounds["$lte"] = hasta.isoformat()
    return {"fecha": bounds} if bounds else {}


class MovementRepository(OrgScopedRepository[MovementInDB]):
    model = MovementInDB
    collection_name = "movimientos"

    async def search(
        self,
        org_id: str,
        desde: Optional[date] = None,
        hasta: Optional[date] = None,
        filters: Optional[Dict[str, str]] = None,
    ) -> List[MovementInDB]:
        query = date_range_query(desde, hasta)
        query.update({k: v for k, v in (filters or {}).items() if v})
        return await self.list_for_org(
            org_id, query, sort=[("fecha", DESCENDING), ("created_at", DESCENDING)]
        )

    async def in_range(self, org_id: str, desde: date, hasta: date) -> List[MovementInDB]:
        return await self.list_for_org(org_id, date_range_query(desde, hasta))

    async def most_recent(self, org_id: str, limit: int) -> List[MovementInDB]:
        """Últimos movimentos lançados (ordem de criação, não de `fecha`)."""
        return await self.list_for_org(org_id, limit=limit, sort=[("created_at", DESCENDING)])

    async def clear_reference(self, org_id: str, field: str, ref_id: str) -> int:
        """Desvincula os movimentos de uma sucursal/categoria apagada (equivale a ON DELETE SET NULL)."""
        query = self.scoped(org_id, {field: ref_id})
        try:
            result: UpdateResult = await self.collection.update_many(
                query, {"$set": {field: None, "updated_at": utcnow()}}
            )
        except Exception as e:
            self._handle_db_exception(e, "clear_reference", query=query)
        if result.modified_count:
            logger.info(f"{result.modified_count} movement(s) unlinked from {field}={ref_id}.")
        return result.modified_count


async def get_movement_repository(db: AsyncIOMotorDatabase = Depends(get_database)) -> MovementRepository:
    return MovementRepository(db)
