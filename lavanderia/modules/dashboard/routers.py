# lavanderia/modules/dashboard/routers.py
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from lavanderia.core.security import CurrentOrg
from .services import DashboardService, get_dashboard_service, parse_include

dashboard_router = APIRouter()


@dashboard_router.get("", summary="Ledger totals, daily series and month KPIs", tags=["Dashboard"])
async def get_dashboard_endpoint(
    org: CurrentOrg,
    include: Optional[str] = Query(None, description="csv de secciones: serie,mes,recientes"),
    limit_recientes: Optional[int] = Query(None, description="1..50, por defecto 5"),
    desde: Optional[date] = Query(None, description="Inicio del rango (por defecto, hace 29 días)"),
    hasta: Optional[date] = Query(None, description="Fin del rango (por defecto, hoy)"),
    service: DashboardService = Depends(get_dashboard_service),
):
    return await service.build(
        org.org_id,
        include=parse_include(include),
        recent_limit=limit_recientes,
        desde=desde,
        hasta=hasta,
    )
