# tests/core/test_error_handlers.py
import pytest
from fastapi import status

pytestmark = pytest.mark.asyncio


async def test_malformed_json_body_is_400_without_offset(authenticated_client):
    response = await authenticated_client.post(
        "/categorias", content="{not json", headers={"Content-Type": "application/json"}
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"error": "JSON decode error"}


async def test_field_error_names_the_field(authenticated_client):
    response = await authenticated_client.post("/categorias", json={"tipo": "ingreso"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"].startswith("nombre: ")


async def test_unknown_route_keeps_error_shape(client):
    response = await client.get("/no-existe")
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert set(response.json()) == {"error"}
