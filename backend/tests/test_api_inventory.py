"""
Back-office workflow through the HTTP API: suppliers, products, stock
movements, purchase orders and the activity log.
"""

from restopos.models import ActivityLog


class TestSuppliersApi:
    def test_crud(self, client, manager_headers):
        resp = client.post(
            "/api/suppliers",
            json={"name": "Gulf Dairy", "email": "sales@gulfdairy.test", "lead_time_days": 2},
            headers=manager_headers,
        )
        assert resp.status_code == 201
        supplier_id = resp.get_json()["id"]

        resp = client.put(f"/api/suppliers/{supplier_id}", json={"phone": "+966 11 000 0000"}, headers=manager_headers)
        assert resp.status_code == 200
        assert resp.get_json()["phone"] == "+966 11 000 0000"

        assert client.delete(f"/api/suppliers/{supplier_id}", headers=manager_headers).status_code == 200
        assert client.get("/api/suppliers", headers=manager_headers).get_json()["count"] == 0
        assert client.get(f"/api/suppliers/{supplier_id}", headers=manager_headers).status_code == 200

    def test_rejects_bad_email(self, client, manager_headers):
        resp = client.post("/api/suppliers", json={"name": "X", "email": "nope"}, headers=manager_headers)
        assert resp.status_code == 400

    def test_rejects_unknown_field(self, client, manager_headers):
        resp = client.post("/api/suppliers", json={"name": "X", "rating": 5}, headers=manager_headers)
        assert resp.status_code == 400

    def test_metrics(self, client, manager_headers, supplier):
        resp = client.get(f"/api/suppliers/{supplier.id}/metrics", headers=manager_headers)
        assert resp.status_code == 200
        assert resp.get_json() == {"supplier_id": supplier.id, "metrics": []}

    def test_unknown(self, client, manager_headers):
        assert client.get("/api/suppliers/999", headers=manager_headers).status_code == 404
        assert client.get("/api/suppliers/999/metrics", headers=manager_headers).status_code == 404


class TestInventoryApi:
    def test_create_and_update_product(self, client, manager_headers, supplier):
        resp = client.post(
            "/api/inventory",
            json={"sku": "LEM-001", "name": "Lemons", "quantity": 12, "unit_price": "1.75", "supplier_id": supplier.id},
            headers=manager_headers,
        )
        assert resp.status_code == 201
        product = resp.get_json()
        assert product["unit_price"] == 1.75

        resp = client.patch(f"/api/inventory/{product['id']}", json={"category": "Produce"}, headers=manager_headers)
        assert resp.status_code == 200
        assert resp.get_json()["category"] == "Produce"

    def test_duplicate_sku_conflict(self, client, manager_headers, products):
        resp = client.post("/api/inventory", json={"sku": "TOM-001", "name": "Dup"}, headers=manager_headers)
        assert resp.status_code == 409

    def test_quantity_not_patchable(self, client, manager_headers, products):
        resp = client.patch(f"/api/inventory/{products[0].id}", json={"quantity": 500}, headers=manager_headers)
        assert resp.status_code == 400

    def test_negative_price(self, client, manager_headers):
        resp = client.post("/api/inventory", json={"sku": "A", "name": "B", "unit_price": -1}, headers=manager_headers)
        assert resp.status_code == 400

    def test_delete_hides_product(self, client, manager_headers, products):
        assert client.delete(f"/api/inventory/{products[0].id}", headers=manager_headers).status_code == 200
        body = client.get("/api/inventory", headers=manager_headers).get_json()
        assert [p["sku"] for p in body["items"]] == ["OIL-001"]

    def test_stock_movement(self, client, manager_headers, manager_user, products, db_session):
        resp = client.post(
            "/api/inventory/stock-movements",
            json={"product_id": products[1].id, "quantity_change": 2, "movement_type": "outbound", "notes": "Spill"},
            headers=manager_headers,
        )
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["movement"]["quantity_change"] == -2
        assert body["product"]["quantity"] == 2

        listed = client.get("/api/inventory/stock-movements?type=outbound&range=today", headers=manager_headers)
        assert listed.get_json()["count"] == 1

        log = db_session.query(ActivityLog).filter_by(action="record_stock_movement").one()
        assert log.user_id == manager_user.id

    def test_stock_movement_validation(self, client, manager_headers, products):
        resp = client.post(
            "/api/inventory/stock-movements",
            json={"product_id": products[0].id, "quantity_change": 0, "movement_type": "inbound"},
            headers=manager_headers,
        )
        assert resp.status_code == 400

        resp = client.post(
            "/api/inventory/stock-movements",
            json={"product_id": 999, "quantity_change": 1, "movement_type": "inbound"},
            headers=manager_headers,
        )
        assert resp.status_code == 404

    def test_bad_movement_filter(self, client, manager_headers):
        resp = client.get("/api/inventory/stock-movements?range=forever", headers=manager_headers)
        assert resp.status_code == 400


class TestPurchaseOrdersApi:
    def test_lifecycle(self, client, manager_headers, supplier, products):
        resp = client.post(
            "/api/purchase-orders",
            json={
                "supplier_id": supplier.id,
                "items": [{"product_id": products[0].id, "quantity": 5, "unit_cost": 2.2}],
                "expected_delivery_date": "2026-11-05",
            },
            headers=manager_headers,
        )
        assert resp.status_code == 201
        po = resp.get_json()
        assert po["total_amount"] == 11.0
        assert po["status"] == "pending"

        resp = client.put(f"/api/purchase-orders/{po['id']}", json={"status": "received"}, headers=manager_headers)
        assert resp.status_code == 200
        assert resp.get_json()["received_at"] is not None

        product = client.get(f"/api/inventory/{products[0].id}", headers=manager_headers).get_json()
        assert product["quantity"] == 15

        assert client.delete(f"/api/purchase-orders/{po['id']}", headers=manager_headers).status_code == 400

    def test_missing_products(self, client, manager_headers, supplier):
        resp = client.post(
            "/api/purchase-orders",
            json={"supplier_id": supplier.id, "items": [{"product_id": 404, "quantity": 1, "unit_cost": 1}]},
            headers=manager_headers,
        )
        assert resp.status_code == 400
        assert resp.get_json()["details"]["missing_product_ids"] == [404]

    def test_unknown_supplier(self, client, manager_headers, products):
        resp = client.post(
            "/api/purchase-orders",
            json={"supplier_id": 999, "items": [{"product_id": products[0].id, "quantity": 1, "unit_cost": 1}]},
            headers=manager_headers,
        )
        assert resp.status_code == 404

    def test_list_and_get(self, client, manager_headers, supplier, products):
        client.post(
            "/api/purchase-orders",
            json={"supplier_id": supplier.id, "items": [{"product_id": products[0].id, "quantity": 1, "unit_cost": 1}]},
            headers=manager_headers,
        )
        body = client.get("/api/purchase-orders?status=pending", headers=manager_headers).get_json()
        assert body["count"] == 1
        po = body["purchase_orders"][0]
        assert client.get(f"/api/purchase-orders/{po['id']}", headers=manager_headers).status_code == 200
        assert client.get("/api/purchase-orders/999", headers=manager_headers).status_code == 404


class TestActivityApi:
    def test_filters(self, client, admin_headers, admin_user, supplier):
        client.post("/api/suppliers", json={"name": "Logged Supplier"}, headers=admin_headers)

        body = client.get(f"/api/activity?user_id={admin_user.id}", headers=admin_headers).get_json()
        actions = [entry["action"] for entry in body["activity"]]
        assert "create_supplier" in actions
        assert "login" in actions

        body = client.get("/api/activity?action=create_supplier", headers=admin_headers).get_json()
        assert body["count"] == 1

    def test_bad_range(self, client, admin_headers):
        assert client.get("/api/activity?range=century", headers=admin_headers).status_code == 400


class TestHealth:
    def test_healthy_after_seeding(self, client, setup_permissions):
        body = client.get("/api/health").get_json()
        assert body["status"] == "healthy"
        assert body["checks"]["permissions"]["details"]["permissions_initialized"] is True

    def test_degraded_without_permissions(self, client, db_session):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.get_json()["status"] == "degraded"
