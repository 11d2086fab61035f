import pytest
from fastapi.testclient import TestClient

from inventory.main import create_app
from inventory.repositories.memory import MemoryStorage
from inventory.services import product_service


def _create(client, payload):
    resp = client.post("/api/products", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_list_products_empty(client):
    resp = client.get("/api/products")
    assert resp.status_code == 200
    assert resp.json() == []


def test_create_product(client, monitor):
    body = _create(client, monitor)

    assert body["id"]
    assert body["name"] == "Monitor"
    assert body["sku"] == "MON-27"
    assert body["price"] == 199.99
    assert body["stock"] == 10
    assert body["minStock"] == 3
    assert body["stockStatus"] == "in-stock"
    assert "createdAt" in body and "updatedAt" in body


def test_create_accepts_snake_case_fields(client):
    body = _create(client, {"name": "Cable", "sku": "cbl", "price": 1, "stock": 1, "min_stock": 2})
    assert body["minStock"] == 2


def test_create_missing_field(client, monitor):
    del monitor["price"]
    resp = client.post("/api/products", json=monitor)

    assert resp.status_code == 400
    assert resp.json() == {"message": "All fields are required"}


def test_create_negative_value(client, monitor):
    monitor["stock"] = -1
    resp = client.post("/api/products", json=monitor)

    assert resp.status_code == 400
    assert resp.json() == {"message": "Values cannot be negative"}


def test_create_malformed_value_is_a_400(client, monitor):
    monitor["stock"] = "lots"
    resp = client.post("/api/products", json=monitor)

    assert resp.status_code == 400
    assert "stock" in resp.json()["message"]


def test_create_duplicate_sku(client, monitor):
    _create(client, monitor)
    monitor["sku"] = "MON-27"
    resp = client.post("/api/products", json=monitor)

    assert resp.status_code == 400
    assert resp.json() == {"message": "SKU must be unique"}


def test_get_product(client, monitor):
    created = _create(client, monitor)

    resp = client.get(f"/api/products/{created['id']}")
    assert resp.status_code == 200
    assert resp.json()["sku"] == "MON-27"

    assert client.get("/api/products/unknown").status_code == 404


def test_update_product_walkthrough(client, monitor):
    created = _create(client, monitor)

    resp = client.put(f"/api/products/{created['id']}", json={"stock": 2})
    assert resp.status_code == 200
    assert resp.json()["stockStatus"] == "low-stock"

    resp = client.put(f"/api/products/{created['id']}", json={"stock": 0})
    assert resp.json()["stockStatus"] == "out-of-stock"

    history = client.get("/api/products/stock-history").json()
    assert [(e["change"], e["changeType"]) for e in history] == [
        (-2, "DECREASE"),
        (-8, "DECREASE"),
        (10, "INITIAL"),
    ]
    assert set(history[0]) == {
        "id", "productId", "productName", "oldStock", "newStock", "change", "changeType", "createdAt",
    }
    assert history[0]["productId"] == created["id"]


def test_update_with_null_fields_keeps_values(client, monitor):
    created = _create(client, monitor)

    resp = client.put(f"/api/products/{created['id']}", json={"name": None, "price": 150, "stock": 10})

    body = resp.json()
    assert body["name"] == "Monitor"
    assert body["price"] == 150
    assert len(client.get("/api/products/stock-history").json()) == 1


def test_update_errors(client, monitor):
    created = _create(client, monitor)
    _create(client, {**monitor, "sku": "other"})

    resp = client.put("/api/products/unknown", json={"stock": 1})
    assert resp.status_code == 404
    assert resp.json() == {"message": "Product not found"}

    resp = client.put(f"/api/products/{created['id']}", json={"price": -5})
    assert resp.status_code == 400

    resp = client.put(f"/api/products/{created['id']}", json={"sku": "OTHER"})
    assert resp.status_code == 400
    assert resp.json() == {"message": "SKU must be unique"}


def test_delete_product_keeps_history(client, monitor):
    created = _create(client, monitor)

    resp = client.delete(f"/api/products/{created['id']}")
    assert resp.status_code == 200
    assert resp.json() == {"message": "Product deleted successfully"}

    assert client.get("/api/products").json() == []
    history = client.get("/api/products/stock-history", params={"productId": created["id"]}).json()
    assert len(history) == 1
    assert history[0]["productName"] == "Monitor"

    assert client.delete(f"/api/products/{created['id']}").status_code == 404


def test_analytics_summary(client, monitor):
    _create(client, monitor)
    _create(client, {"name": "Cable", "sku": "cbl", "price": 2.5, "stock": 2, "minStock": 5})
    _create(client, {"name": "Dock", "sku": "dock", "price": 80, "stock": 0, "minStock": 4})

    body = client.get("/api/products/analytics/summary").json()

    assert body["totalProducts"] == 3
    assert body["totalInventoryValue"] == 199.99 * 10 + 2.5 * 2
    assert body["lowStockCount"] == 1
    assert body["outOfStockCount"] == 1
    assert [p["sku"] for p in body["lowStockItems"]] == ["CBL"]
    assert [p["sku"] for p in body["outOfStockItems"]] == ["DOCK"]


def test_analytics_summary_empty(client):
    body = client.get("/api/products/analytics/summary").json()

    assert body["totalProducts"] == 0
    assert body["totalInventoryValue"] == 0
    assert body["lowStockItems"] == []


def test_stock_history_limit(client, monitor):
    created = _create(client, monitor)
    for stock in (11, 12, 13):
        client.put(f"/api/products/{created['id']}", json={"stock": stock})

    history = client.get("/api/products/stock-history", params={"limit": 2}).json()
    assert [e["newStock"] for e in history] == [13, 12]

    assert client.get("/api/products/stock-history", params={"limit": 0}).status_code == 400


def test_unhandled_error_hides_detail_outside_development(settings, monkeypatch):
    def broken(repo):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(product_service, "list_products", broken)
    app = create_app(settings, storage=MemoryStorage())
    with TestClient(app, raise_server_exceptions=False) as client:
        resp = client.get("/api/products")

    assert resp.status_code == 500
    assert resp.json() == {"message": "Internal server error"}


def test_unhandled_error_shows_detail_in_development(settings, monkeypatch):
    def broken(repo):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(product_service, "list_products", broken)
    dev = settings.model_copy(update={"ENVIRONMENT": "development"})
    app = create_app(dev, storage=MemoryStorage())
    with TestClient(app, raise_server_exceptions=False) as client:
        resp = client.get("/api/products")

    assert resp.status_code == 500
    assert resp.json()["error"] == "disk on fire"


class BrokenStorage(MemoryStorage):
    backend = "broken"

    def init(self):
        raise ConnectionError("database unreachable")


def test_startup_fails_without_storage(settings):
    app = create_app(settings, storage=BrokenStorage())

    with pytest.raises(Exception):
        with TestClient(app):
            pass


def _post_raw(client, body: str):
    return client.post("/api/products", content=body, headers={"Content-Type": "application/json"})


def test_non_finite_price_is_rejected(client, monitor):
    _create(client, monitor)

    for literal in ("Infinity", "-Infinity", "NaN"):
        resp = _post_raw(client, '{"name":"Cable","sku":"cbl","price":%s,"stock":1,"minStock":0}' % literal)
        assert resp.status_code == 400, literal
        assert "price" in resp.json()["message"]

    created = client.get("/api/products").json()[0]
    resp = client.put(
        f"/api/products/{created['id']}", content='{"price":NaN}', headers={"Content-Type": "application/json"}
    )
    assert resp.status_code == 400

    summary = client.get("/api/products/analytics/summary").json()
    assert summary["totalProducts"] == 1
    assert summary["totalInventoryValue"] == 199.99 * 10


def test_boolean_stock_is_rejected(client, monitor):
    monitor["stock"] = True
    resp = client.post("/api/products", json=monitor)

    assert resp.status_code == 400
    assert "stock" in resp.json()["message"]
    assert client.get("/api/products").json() == []


def test_timestamps_are_utc(client, monitor):
    product = _create(client, monitor)
    entry = client.get("/api/products/stock-history").json()[0]

    assert product["createdAt"].endswith("Z")
    assert product["updatedAt"].endswith("Z")
    assert entry["createdAt"].endswith("Z")
