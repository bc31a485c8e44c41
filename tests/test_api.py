from decimal import Decimal

from app.core.errors import SyncError


def settle(client):
    """Wait for queued remote writes and reload local state from the store."""
    assert client.post("/api/v1/sync/refresh").status_code == 200


def create_sale(client, items, **extra):
    return client.post(
        "/api/v1/sales",
        json={"items": [{"product_id": pid, "quantity": qty} for pid, qty in items], **extra},
    )


def test_health(client):
    r = client.get("/api/ready")
    assert r.status_code == 200
    assert r.json()["message"] == "ready"


def test_catalog_is_seeded_empty(client):
    r = client.get("/api/v1/products")
    assert r.status_code == 200
    names = [p["name"] for p in r.json()]
    assert names == ["Frango", "Sobrecoxa", "Linguiça", "Carne", "Costela", "Maionese"]
    assert all(p["stock"] == 0 for p in r.json())

    overview = client.get("/api/v1/products/stock").json()
    assert overview["total_stock"] == 0
    assert overview["can_sell"] is False


def test_set_stock_and_total(client):
    r = client.put("/api/v1/products/1/stock", json={"quantity": 10})
    assert r.status_code == 200
    assert r.json()["stock"] == 10
    client.put("/api/v1/products/6/stock", json={"quantity": 4})
    settle(client)
    assert client.get("/api/v1/products/total-stock").json() == 14


def test_set_stock_unknown_product(client):
    r = client.put("/api/v1/products/99/stock", json={"quantity": 1})
    assert r.status_code == 404


def test_sale_lifecycle(client):
    client.put("/api/v1/products/1/stock", json={"quantity": 10})
    settle(client)

    r = create_sale(client, [("1", 3)])
    assert r.status_code == 201
    body = r.json()
    assert Decimal(body["total"]) == Decimal("150")
    assert body["display_amount"] == "R$ 150,00"
    assert body["items"][0]["product_name"] == "Frango"
    sale_id = body["id"]

    assert client.get("/api/v1/products/total-stock").json() == 7
    assert [s["id"] for s in client.get("/api/v1/sales").json()] == [sale_id]
    assert client.get(f"/api/v1/sales/{sale_id}").status_code == 200

    r = client.delete(f"/api/v1/sales/{sale_id}")
    assert r.status_code == 200
    assert r.json() == {"message": "Sale deleted", "id": sale_id}
    settle(client)
    assert client.get("/api/v1/products/total-stock").json() == 10
    assert client.get("/api/v1/sales").json() == []


def test_reservation_flow(client):
    client.put("/api/v1/products/2/stock", json={"quantity": 5})
    settle(client)
    r = create_sale(client, [("2", 2)], is_reservation=True, customer_name="Ana")
    assert r.status_code == 201
    sale_id = r.json()["id"]

    reservations = client.get("/api/v1/sales", params={"kind": "reservations"}).json()
    assert [s["id"] for s in reservations] == [sale_id]
    assert client.get("/api/v1/sales", params={"kind": "direct"}).json() == []

    r = client.patch(f"/api/v1/sales/{sale_id}", json={"is_paid": True})
    assert r.status_code == 200
    assert r.json()["is_paid"] is True

    r = client.post(f"/api/v1/sales/{sale_id}/collect")
    assert r.status_code == 200
    assert r.json()["is_collected"] is True


def test_reservation_without_name_is_rejected(client):
    r = create_sale(client, [("1", 1)], is_reservation=True)
    assert r.status_code == 422


def test_empty_sale_is_rejected(client):
    assert client.post("/api/v1/sales", json={"items": []}).status_code == 422


def test_sale_with_unknown_product(client):
    assert create_sale(client, [("42", 1)]).status_code == 404


def test_patch_cannot_touch_total(client):
    sale_id = create_sale(client, [("1", 1)]).json()["id"]
    r = client.patch(f"/api/v1/sales/{sale_id}", json={"total": "0"})
    assert r.status_code == 422
    assert Decimal(client.get(f"/api/v1/sales/{sale_id}").json()["total"]) == Decimal("50")


def test_unknown_sale_returns_404(client):
    assert client.get("/api/v1/sales/nope").status_code == 404
    assert client.delete("/api/v1/sales/nope").status_code == 404
    assert client.post("/api/v1/sales/nope/collect").status_code == 404


def test_sync_status_and_refresh(client):
    status = client.get("/api/v1/sync/status").json()
    assert status["subscribed"] is True
    assert status["failed_writes"] == 0

    r = client.post("/api/v1/sync/refresh")
    assert r.status_code == 200
    assert r.json()["subscribed"] is True


def test_refresh_reports_unreachable_store(client, monkeypatch):
    service = client.app.state.container.api_container.stall_service()

    async def unreachable():
        raise SyncError("resync", ConnectionError("offline"))

    monkeypatch.setattr(service, "resync", unreachable)
    assert client.post("/api/v1/sync/refresh").status_code == 503


def test_refresh_unexpected_error_is_500(client, monkeypatch):
    service = client.app.state.container.api_container.stall_service()

    async def broken():
        raise RuntimeError("boom")

    monkeypatch.setattr(service, "resync", broken)
    r = client.post("/api/v1/sync/refresh")
    assert r.status_code == 500
    assert r.json()["detail"] == "Failed to refresh from remote store"


def test_realtime_pushes_product_snapshot(client):
    with client.websocket_connect("/api/v1/ws/realtime") as ws:
        client.put("/api/v1/products/1/stock", json={"quantity": 5})
        message = ws.receive_json()

    assert message["type"] == "product.snapshot"
    assert message["resource"] == "product"
    assert message["action"] == "snapshot"
    assert message["payload"]["total_stock"] == 5


def test_realtime_pushes_sale_then_product_snapshot(client):
    with client.websocket_connect("/api/v1/ws/realtime") as ws:
        sale_id = create_sale(client, [("1", 1)]).json()["id"]
        first = ws.receive_json()
        second = ws.receive_json()

    assert first["type"] == "sale.snapshot"
    assert first["payload"]["ids"] == [sale_id]
    assert second["type"] == "product.snapshot"
