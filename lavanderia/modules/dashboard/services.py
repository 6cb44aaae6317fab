# lavanderia/modules/dashboard/services.py
from datetime import date, timedelta
from typing import Any, Dict, FrozenSet, Iterable, Optional

from fastapi import Depends
from loguru import logger

from lavanderia.core.config import Settings, get_settings
from lavanderia.core.exceptions import InvalidRange
from lavanderia.modules.branches.repository import BranchRepository, get_branch_repository
from lavanderia.modules.categories.repository import CategoryRepository, get_category_repository
from lavanderia.modules.movements.repository import MovementRepository, get_movement_repository
from . import aggregation

SECTIONS: FrozenSet[str] = frozenset({"serie", "mes", "recientes"})
DEFAULT_RANGE_DAYS = 30
DEFAULT_RECENT_LIMIT = 5
MAX_RECENT_LIMIT = 50


def parse_include(raw: Optional[str]) -> FrozenSet[str]:
    """csv de seções; vazio ou ausente = todas. Nomes desconhecidos são ignorados."""
    if raw is None or not raw.strip():
        return SECTIONS
    return frozenset(s.strip() for s in raw.split(",") if s.strip()) & SECTIONS


def clamp_recent_limit(value: Optional[int]) -> int:
    return max(1, min(MAX_RECENT_LIMIT, value or DEFAULT_RECENT_LIMIT))


class DashboardService:
    def __init__(
        self,
        movement_repo: MovementRepository,
        category_repo: CategoryRepository,
        branch_repo: BranchRepository,
        settings: Settings,
    ):
        self.movement_repo = movement_repo
        self.category_repo = category_repo
        self.branch_repo = branch_repo
        self.settings = settings

    def resolve_range(self, desde: Optional[date], hasta: Optional[date], today: date):
        hasta = hasta or today
        desde = desde or today - timedelta(days=DEFAULT_RANGE_DAYS - 1)
        if desde > hasta:
            raise InvalidRange()
        return desde, hasta

    async def build(
        self,
        org_id: str,
        include: Iterable[str] = SECTIONS,
        recent_limit: Optional[int] = None,
        desde: Optional[date] = None,
        hasta: Optional[date] = None,
        today: Optional[date] = None,
    ) -> Dict[str, Any]:
        today = today or self.settings.today()
        desde, hasta = self.resolve_range(desde, hasta, today)
        include = frozenset(include)
        log = logger.bind(service="DashboardService", org_id=org_id)
        log.debug(f"Building dashboard {desde}..{hasta} include={sorted(include)}")

        category_names = await self.category_repo.name_map(org_id)
        branch_names = await self.branch_repo.name_map(org_id)

        movements = await self.movement_repo.in_range(org_id, desde, hasta)
        rollup = aggregation.accumulate(movements)
        series = aggregation.daily_series(rollup, desde, hasta)

        response: Dict[str, Any] = {
            "range": {"desde": desde.isoformat(), "hasta": hasta.isoformat(), "dias": len(series)},
            "totales": rollup.totals.to_dict(),
            "por_dia": series,
            "por_categoria": aggregation.category_rollup(rollup, category_names),
        }

        if "mes" in include:
            month_movements = await self.movement_repo.in_range(org_id, today.replace(day=1), today)
            month = aggregation.accumulate(month_movements)
            response["kpis_mes"] = month.totals.to_dict()
            response["por_categoria_mes"] = aggregation.category_rollup(month, category_names)
            response["por_sucursal_mes"] = aggregation.branch_rollup(month, branch_names)

        if "recientes" in include:
            recent = await self.movement_repo.most_recent(org_id, clamp_recent_limit(recent_limit))
            response["recientes"] = aggregation.recent_feed(recent, category_names)

        response["meta"] = {"items": rollup.items}
        return response


async def get_dashboard_service(
    movement_repo: MovementRepository = Depends(get_movement_repository),
    category_repo: CategoryRepository = Depends(get_category_repository),
    branch_repo: BranchRepository = Depends(get_branch_repository),
    settings: Settings = Depends(get_settings),
) -> DashboardService:
    return DashboardService(movement_repo, category_repo, branch_repo, settings)
