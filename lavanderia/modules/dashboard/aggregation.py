# lavanderia/modules/dashboard/aggregation.py
"""
Agregações do dashboard sobre movimentos já carregados em memória.

Funções puras: recebem movimentos e mapas id -> nome, devolvem dicts prontos
para o JSON. Somas em Decimal usando o valor absoluto de `monto`; o `tipo`
decide se o valor é ingreso ou egreso.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Optional

from lavanderia.modules.movements.models import SIN_CATEGORIA, SIN_SUCURSAL, MovementInDB

ZERO = Decimal("0")


def as_number(value: Decimal) -> float:
    return float(value)


def each_day(desde: date, hasta: date) -> List[date]:
    """Todos os dias de [desde, hasta], inclusive, em ordem crescente."""
    return [desde + timedelta(days=i) for i in range((hasta - desde).days + 1)]


@dataclass
class Bucket:
    ingresos: Decimal = ZERO
    egresos: Decimal = ZERO

    def add(self, tipo: str, amount: Decimal):
        if tipo == "ingreso":
            self.ingresos += amount
        else:
            self.egresos += amount

    @property
    def balance(self) -> Decimal:
        return self.ingresos - self.egresos

    @property
    def volume(self) -> Decimal:
        return self.ingresos + self.egresos

    def to_dict(self) -> Dict[str, float]:
        return {
            "ingresos": as_number(self.ingresos),
            "egresos": as_number(self.egresos),
            "balance": as_number(self.balance),
        }


@dataclass
class Rollup:
    totals: Bucket = field(default_factory=Bucket)
    by_day: Dict[date, Bucket] = field(default_factory=lambda: defaultdict(Bucket))
    by_category: Dict[str, Dict[Optional[str], Decimal]] = field(
        default_factory=lambda: {"ingreso": defaultdict(lambda: ZERO), "egreso": defaultdict(lambda: ZERO)}
    )
    by_branch: Dict[Optional[str], Bucket] = field(default_factory=lambda: defaultdict(Bucket))
    items: int = 0


def accumulate(movements: Iterable[MovementInDB]) -> Rollup:
    rollup = Rollup()
    for m in movements:
        amount = abs(m.monto)
        kind = "ingreso" if m.tipo == "ingreso" else "egreso"
        rollup.totals.add(kind, amount)
        rollup.by_day[m.fecha].add(kind, amount)
        rollup.by_category[kind][m.categoria_id or None] += amount
        rollup.by_branch[m.sucursal_id or None].add(kind, amount)
        rollup.items += 1
    return rollup


def daily_series(rollup: Rollup, desde: date, hasta: date) -> List[Dict]:
    """Série contínua: um item por dia do intervalo, zerado quando não houve movimento."""
    series = []
    for day in each_day(desde, hasta):
        bucket = rollup.by_day.get(day) or Bucket()
        series.append({"fecha": day.isoformat(), **bucket.to_dict()})
    return series


def category_rollup(rollup: Rollup, category_names: Mapping[str, str]) -> Dict[str, List[Dict]]:
    def to_list(totals: Mapping[Optional[str], Decimal]) -> List[Dict]:
        rows = [
            {
                "categoria_id": category_id,
                "nombre": category_names.get(category_id, SIN_CATEGORIA) if category_id else SIN_CATEGORIA,
                "total": total,
            }
            for category_id, total in totals.items()
        ]
        rows.sort(key=lambda r: r["total"], reverse=True)
        return [{**r, "total": as_number(r["total"])} for r in rows]

    return {"ingreso": to_list(rollup.by_category["ingreso"]), "egreso": to_list(rollup.by_category["egreso"])}


def branch_rollup(rollup: Rollup, branch_names: Mapping[str, str]) -> List[Dict]:
    """Sucursais do período ordenadas por volume (ingresos + egresos), maior primeiro."""
    ordered = sorted(rollup.by_branch.items(), key=lambda item: item[1].volume, reverse=True)
    return [
        {
            "sucursal_id": branch_id,
            "nombre": branch_names.get(branch_id, SIN_SUCURSAL) if branch_id else SIN_SUCURSAL,
            **bucket.to_dict(),
        }
        for branch_id, bucket in ordered
    ]


def recent_feed(movements: Iterable[MovementInDB], category_names: Mapping[str, str]) -> List[Dict]:
    """Egresos saem com sinal negativo, ingresos positivos."""
    feed = []
    for m in movements:
        amount = abs(m.monto)
        feed.append(
            {
                "id": m.id,
                "tipo": m.tipo,
                "categoria": category_names.get(m.categoria_id, SIN_CATEGORIA) if m.categoria_id else SIN_CATEGORIA,
                "fecha": f"{m.fecha.isoformat()}T00:00:00",
                "monto": as_number(-amount if m.tipo == "egreso" else amount),
            }
        )
    return feed
