# tests/modules/dashboard/test_aggregation.py
from datetime import date
from decimal import Decimal

from lavanderia.modules.dashboard import aggregation
from lavanderia.modules.movements.models import MovementInDB


def mov(tipo, monto, fecha, categoria_id=None, sucursal_id=None, id="m"):
    return MovementInDB(
        id=id,
        org_id="org-1",
        tipo=tipo,
        monto=Decimal(str(monto)),
        fecha=fecha,
        categoria_id=categoria_id,
        sucursal_id=sucursal_id,
    )


def test_daily_series_example_fills_gaps_and_totals():
    movements = [
        mov("ingreso", 100, date(2024, 6, 1)),
        mov("egreso", 40, date(2024, 6, 1)),
        mov("ingreso", 10, date(2024, 6, 3)),
    ]
    rollup = aggregation.accumulate(movements)
    series = aggregation.daily_series(rollup, date(2024, 6, 1), date(2024, 6, 3))

    assert series == [
        {"fecha": "2024-06-01", "ingresos": 100, "egresos": 40, "balance": 60},
        {"fecha": "2024-06-02", "ingresos": 0, "egresos": 0, "balance": 0},
        {"fecha": "2024-06-03", "ingresos": 10, "egresos": 0, "balance": 10},
    ]
    assert rollup.totals.to_dict() == {"ingresos": 110, "egresos": 40, "balance": 70}


def test_series_sums_match_totals_and_sign_is_ignored():
    movements = [
        mov("egreso", -25.5, date(2024, 2, 28)),
        mov("ingreso", -10, date(2024, 2, 29)),
        mov("egreso", 4.5, date(2024, 3, 1)),
    ]
    rollup = aggregation.accumulate(movements)
    series = aggregation.daily_series(rollup, date(2024, 2, 27), date(2024, 3, 2))

    assert [s["fecha"] for s in series] == ["2024-02-27", "2024-02-28", "2024-02-29", "2024-03-01", "2024-03-02"]
    assert sum(s["ingresos"] for s in series) == rollup.totals.to_dict()["ingresos"] == 10
    assert sum(s["egresos"] for s in series) == rollup.totals.to_dict()["egresos"] == 30
    assert all(s["balance"] == s["ingresos"] - s["egresos"] for s in series)


def test_single_day_range_has_one_entry():
    rollup = aggregation.accumulate([])
    assert aggregation.daily_series(rollup, date(2024, 1, 1), date(2024, 1, 1)) == [
        {"fecha": "2024-01-01", "ingresos": 0, "egresos": 0, "balance": 0}
    ]


def test_category_rollup_sorted_desc_with_uncategorized_bucket():
    movements = [
        mov("egreso", 10, date(2024, 6, 1), categoria_id="c-luz"),
        mov("egreso", 70, date(2024, 6, 1), categoria_id="c-renta"),
        mov("egreso", 30, date(2024, 6, 2)),
        mov("egreso", 5, date(2024, 6, 2), categoria_id="c-borrada"),
        mov("ingreso", 50, date(2024, 6, 2), categoria_id="c-lavado"),
    ]
    names = {"c-luz": "Luz", "c-renta": "Renta", "c-lavado": "Lavado"}
    rollup = aggregation.category_rollup(aggregation.accumulate(movements), names)

    assert rollup["egreso"] == [
        {"categoria_id": "c-renta", "nombre": "Renta", "total": 70},
        {"categoria_id": None, "nombre": "Sin categoría", "total": 30},
        {"categoria_id": "c-luz", "nombre": "Luz", "total": 10},
        {"categoria_id": "c-borrada", "nombre": "Sin categoría", "total": 5},
    ]
    assert rollup["ingreso"] == [{"categoria_id": "c-lavado", "nombre": "Lavado", "total": 50}]


def test_branch_rollup_sorted_by_volume():
    movements = [
        mov("ingreso", 100, date(2024, 6, 1), sucursal_id="s-centro"),
        mov("egreso", 20, date(2024, 6, 1), sucursal_id="s-centro"),
        mov("egreso", 500, date(2024, 6, 1)),
        mov("ingreso", 30, date(2024, 6, 1), sucursal_id="s-norte"),
    ]
    rows = aggregation.branch_rollup(aggregation.accumulate(movements), {"s-centro": "Centro", "s-norte": "Norte"})

    assert [r["nombre"] for r in rows] == ["Sin sucursal", "Centro", "Norte"]
    assert rows[0] == {"sucursal_id": None, "nombre": "Sin sucursal", "ingresos": 0, "egresos": 500, "balance": -500}
    assert rows[1]["balance"] == 80


def test_recent_feed_signs_expenses_negative():
    movements = [
        mov("egreso", 40, date(2024, 6, 1), categoria_id="c-luz", id="a"),
        mov("ingreso", -15, date(2024, 6, 2), id="b"),
    ]
    feed = aggregation.recent_feed(movements, {"c-luz": "Luz"})

    assert feed == [
        {"id": "a", "tipo": "egreso", "categoria": "Luz", "fecha": "2024-06-01T00:00:00", "monto": -40},
        {"id": "b", "tipo": "ingreso", "categoria": "Sin categoría", "fecha": "2024-06-02T00:00:00", "monto": 15},
    ]
