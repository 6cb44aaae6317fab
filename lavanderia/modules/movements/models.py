# lavanderia/modules/movements/models.py
from datetime import date
from decimal import Decimal
from typing import ClassVar, FrozenSet, Optional

from pydantic import Field

from lavanderia.models.api_common import DocumentModel, Money, RequestSchema
from lavanderia.modules.categories.models import MOVEMENT_KINDS

SIN_CATEGORIA = "Sin categoría"
SIN_SUCURSAL = "Sin sucursal"


class MovementInDB(DocumentModel):
    tipo: MOVEMENT_KINDS
    monto: Money
    fecha: date
    categoria_id: Optional[str] = None
    sucursal_id: Optional[str] = None
    metodo_pago: Optional[str] = None
    nota: Optional[str] = None
    usuario_id: Optional[str] = None


class MovementRow(MovementInDB):
    """Movimento achatado com os nomes de categoria e sucursal para a listagem."""

    categoria_nombre: str = SIN_CATEGORIA
    sucursal_nombre: str = SIN_SUCURSAL


class MovementCreateAPI(RequestSchema):
    tipo: MOVEMENT_KINDS
    monto: Decimal = Field(..., description="Importe; el signo se ignora en los totales")
    fecha: Optional[date] = Field(None, description="Por defecto, hoy en la zona horaria configurada")
    categoria_id: Optional[str] = None
    sucursal_id: Optional[str] = None
    metodo_pago: Optional[str] = None
    nota: Optional[str] = None


class MovementUpdateAPI(RequestSchema):
    nullable_fields: ClassVar[FrozenSet[str]] = frozenset({"categoria_id", "sucursal_id", "metodo_pago", "nota"})

    tipo: Optional[MOVEMENT_KINDS] = None
    monto: Optional[Decimal] = None
    fecha: Optional[date] = None
    categoria_id: Optional[str] = None
    sucursal_id: Optional[str] = None
    metodo_pago: Optional[str] = None
    nota: Optional[str] = None
