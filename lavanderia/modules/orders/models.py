# lavanderia/modules/orders/models.py
from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import Field

from lavanderia.models.api_common import DocumentModel, Money, RequestSchema

ORDER_STATES = Literal["pendiente", "en_proceso", "listo", "entregado", "cancelado"]
ACTIVE_STATES = ("pendiente", "en_proceso", "listo")
CLOSED_STATES = ("entregado", "cancelado")

EVIDENCE_KINDS = Literal["ingreso", "entrega"]

CLIENTE_MANUAL = "Cliente Manual"


class OrderInDB(DocumentModel):
    folio: str
    cliente_id: Optional[str] = None
    descripcion: Optional[str] = None
    fecha_entrega_estimada: Optional[date] = None
    monto_total: Money = Decimal("0")
    saldo_pendiente: Money = Decimal("0")
    estado: ORDER_STATES = "pendiente"
    fecha_entregado: Optional[datetime] = None


class OrderRow(OrderInDB):
    cliente_nombre: str = CLIENTE_MANUAL
    cliente_telefono: str = ""


class OrderCreateAPI(RequestSchema):
    cliente_id: Optional[str] = None
    descripcion: Optional[str] = None
    fecha_entrega_estimada: Optional[date] = None
    monto_total: Decimal = Field(Decimal("0"), ge=0)


class OrderUpdateAPI(RequestSchema):
    estado: Optional[ORDER_STATES] = None
    saldo_pendiente: Optional[Decimal] = Field(None, ge=0)
    fecha_entrega_estimada: Optional[date] = None
    descripcion: Optional[str] = None


class EvidenceInDB(DocumentModel):
    pedido_id: str
    url: str
    path: Optional[str] = None
    tipo: EVIDENCE_KINDS = "ingreso"
    nota: str = ""
