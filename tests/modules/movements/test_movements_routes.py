# tests/modules/movements/test_movements_routes.py
import pytest
import pytest_asyncio
from fastapi import status

from conftest import MEMBER, OTHER_ORG_ID

pytestmark = pytest.mark.asyncio


@pytest_asyncio.fixture
async def catalog(authenticated_client):
    renta = (await authenticated_client.post("/categorias", json={"nombre": "Renta", "tipo": "egreso"})).json()
    lavado = (await authenticated_client.post("/categorias", json={"nombre": "Lavado", "tipo": "ingreso"})).json()
    centro = (await authenticated_client.post("/sucursales", json={"nombre": "Centro"})).json()
    return {"renta": renta["id"], "lavado": lavado["id"], "centro": centro["id"]}


async def test_create_stamps_user_and_default_date(authenticated_client, catalog, settings):
    response = await authenticated_client.post(
        "/movimientos",
        json={"tipo": "ingreso", "monto": 150.5, "categoria_id": catalog["lavado"], "sucursal_id": catalog["centro"]},
    )
    assert response.status_code == status.HTTP_201_CREATED
    body = response.json()
    assert body["usuario_id"] == MEMBER
    assert body["monto"] == 150.5
    assert body["fecha"] == settings.today().isoformat()


async def test_references_must_belong_to_org(authenticated_client, db, catalog):
    foreign = await db["sucursales"].insert_one({"org_id": OTHER_ORG_ID, "nombre": "Ajena", "activo": True})

    response = await authenticated_client.post(
        "/movimientos", json={"tipo": "egreso", "monto": 10, "sucursal_id": str(foreign.inserted_id)}
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"error": "sucursal_id inválido"}

    response = await authenticated_client.post(
        "/movimientos", json={"tipo": "egreso", "monto": 10, "categoria_id": "no-existe"}
    )
    assert response.json() == {"error": "categoria_id inválido"}
    assert await db["movimientos"].count_documents({}) == 0


async def test_amount_and_kind_required(authenticated_client):
    response = await authenticated_client.post("/movimientos", json={"tipo": "ingreso"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    response = await authenticated_client.post("/movimientos", json={"monto": 5})
    assert response.status_code == status.HTTP_400_BAD_REQUEST


async def test_list_filters_flattening_and_text_search(authenticated_client, catalog):
    rows = [
        {"tipo": "egreso", "monto": 800, "fecha": "2024-06-01", "categoria_id": catalog["renta"],
         "sucursal_id": catalog["centro"], "metodo_pago": "transferencia"},
        {"tipo": "ingreso", "monto": 120, "fecha": "2024-06-02", "categoria_id": catalog["lavado"],
         "metodo_pago": "efectivo", "nota": "Edredón king"},
        {"tipo": "ingreso", "monto": 60, "fecha": "2024-06-03", "metodo_pago": "efectivo"},
    ]
    for row in rows:
        assert (await authenticated_client.post("/movimientos", json=row)).status_code == status.HTTP_201_CREATED

    listed = (await authenticated_client.get("/movimientos")).json()
    assert [m["fecha"] for m in listed] == ["2024-06-03", "2024-06-02", "2024-06-01"]
    assert listed[0]["categoria_nombre"] == "Sin categoría"
    assert listed[0]["sucursal_nombre"] == "Sin sucursal"
    assert listed[2]["categoria_nombre"] == "Renta"
    assert listed[2]["sucursal_nombre"] == "Centro"

    ranged = (await authenticated_client.get("/movimientos", params={"desde": "2024-06-02", "hasta": "2024-06-03"})).json()
    assert len(ranged) == 2

    incomes = (await authenticated_client.get("/movimientos", params={"tipo": "ingreso", "metodo_pago": "efectivo"})).json()
    assert {m["monto"] for m in incomes} == {120, 60}

    by_branch = (await authenticated_client.get("/movimientos", params={"sucursal_id": catalog["centro"]})).json()
    assert [m["monto"] for m in by_branch] == [800]

    by_note = (await authenticated_client.get("/movimientos", params={"q": "EDREDÓN"})).json()
    assert [m["monto"] for m in by_note] == [120]

    by_category_name = (await authenticated_client.get("/movimientos", params={"q": "renta"})).json()
    assert [m["monto"] for m in by_category_name] == [800]

    page = (await authenticated_client.get("/movimientos", params={"limit": 1, "offset": 1})).json()
    assert [m["fecha"] for m in page] == ["2024-06-02"]


async def test_update_and_delete(authenticated_client, catalog):
    created = (
        await authenticated_client.post(
            "/movimientos", json={"tipo": "egreso", "monto": 10, "fecha": "2024-06-01", "categoria_id": catalog["renta"]}
        )
    ).json()

    response = await authenticated_client.put(f"/movimientos/{created['id']}", json={"monto": 12, "categoria_id": None})
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["monto"] == 12
    assert response.json()["categoria_id"] is None

    response = await authenticated_client.put(f"/movimientos/{created['id']}", json={"sucursal_id": "nope"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST

    assert (await authenticated_client.delete(f"/movimientos/{created['id']}")).json() == {"ok": True}
    response = await authenticated_client.put(f"/movimientos/{created['id']}", json={"monto": 1})
    assert response.status_code == status.HTTP_404_NOT_FOUND
