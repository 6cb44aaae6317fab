# lavanderia/api/v1.py
from fastapi import APIRouter

from lavanderia.modules.auth.routers import auth_router
from lavanderia.modules.branches.routers import branches_router
from lavanderia.modules.categories.routers import categories_router
from lavanderia.modules.clients.routers import clients_router
from lavanderia.modules.dashboard.routers import dashboard_router
from lavanderia.modules.movements.routers import movements_router
from lavanderia.modules.orders.routers import orders_router
from lavanderia.modules.tracking.routers import tracking_router

api_router = APIRouter()


@api_router.get("/health", tags=["Health Check"], summary="Liveness probe")
async def health():
    return {"ok": True}


api_router.include_router(auth_router, prefix="/auth")
api_router.include_router(clients_router, prefix="/clientes")
api_router.include_router(categories_router, prefix="/categorias")
api_router.include_router(branches_router, prefix="/sucursales")
api_router.include_router(movements_router, prefix="/movimientos")
api_router.include_router(dashboard_router, prefix="/dashboard")
api_router.include_router(orders_router, prefix="/pedidos")
api_router.include_router(tracking_router, prefix="/rastreo")
