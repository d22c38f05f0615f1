"""Tests for stock API endpoints."""
import uuid
import pytest


GLASS_PAYLOAD = {
    "kind": "glass",
    "productName": "Reflective Glass 5mm",
    "category": "Reflective",
    "batchNumber": "RF-2025-007",
    "supplier": "Saint-Gobain",
    "currentQuantity": 40,
    "originalQuantity": 50,
    "unitPrice": "38.50",
    "thicknessMm": 5,
    "widthCm": 244,
    "heightCm": 183
}


class TestAuthentication:

    def test_requires_bearer_token(self, client):
        response = client.get("/api/v1/stock")
        assert response.status_code in (401, 403)

    def test_rejects_invalid_token(self, client):
        response = client.get("/api/v1/stock", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_health_is_public(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] in ("healthy", "unhealthy")
        assert "version" in data


class TestCreateAndRead:

    def test_create_stock_item(self, client, auth_headers):
        response = client.post("/api/v1/stock", json=GLASS_PAYLOAD, headers=auth_headers)

        assert response.status_code == 201
        data = response.json()
        assert data["batchNumber"] == "RF-2025-007"
        assert data["currentQuantity"] == 40
        assert data["originalQuantity"] == 50
        assert data["isLowStock"] is False
        assert data["totalAreaM2"] == pytest.approx(178.61, abs=0.01)

    def test_create_accepts_snake_case(self, client, auth_headers):
        payload = {
            "kind": "medicine",
            "product_name": "Ibuprofen 200mg",
            "batch_number": "IBU-01",
            "supplier": "Dawa Ltd",
            "current_quantity": 300
        }
        response = client.post("/api/v1/stock", json=payload, headers=auth_headers)

        assert response.status_code == 201
        assert response.json()["originalQuantity"] == 300

    def test_create_duplicate_batch(self, client, auth_headers, glass_item):
        payload = {**GLASS_PAYLOAD, "batchNumber": glass_item.batch_number}
        response = client.post("/api/v1/stock", json=payload, headers=auth_headers)

        assert response.status_code == 409
        assert response.json()["details"]["field"] == "batch_number"

    def test_create_current_above_original(self, client, auth_headers):
        payload = {**GLASS_PAYLOAD, "currentQuantity": 60}
        response = client.post("/api/v1/stock", json=payload, headers=auth_headers)

        assert response.status_code == 422
        assert response.json()["error"] == "Validation failed"

    def test_get_stock_item(self, client, auth_headers, glass_item):
        response = client.get(f"/api/v1/stock/{glass_item.id}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["productName"] == glass_item.product_name

    def test_get_unknown_item(self, client, auth_headers):
        response = client.get(f"/api/v1/stock/{uuid.uuid4()}", headers=auth_headers)

        assert response.status_code == 404
        body = response.json()
        assert body["details"]["resource"] == "StockItem"
        assert "path" in body

    def test_list_with_filters(self, client, auth_headers, glass_item, medicine_item):
        response = client.get("/api/v1/stock", params={"kind": "medicine"}, headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["items"][0]["id"] == str(medicine_item.id)

    def test_search(self, client, auth_headers, glass_item, make_item):
        make_item(product_name="Clear Float Glass 4mm", current_quantity=0, original_quantity=10)

        response = client.get("/api/v1/stock/search", params={"q": "clear float"}, headers=auth_headers)

        assert response.status_code == 200
        ids = [i["id"] for i in response.json()["items"]]
        assert ids == [str(glass_item.id)]


class TestUpdateAndDelete:

    def test_patch_descriptive_fields(self, client, auth_headers, glass_item):
        response = client.patch(
            f"/api/v1/stock/{glass_item.id}",
            json={"warehouseLocation": "Rack B1", "sellingPrice": "65.00"},
            headers=auth_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["warehouseLocation"] == "Rack B1"
        assert data["currentQuantity"] == 100

    def test_patch_ignores_quantities(self, client, auth_headers, glass_item):
        response = client.patch(
            f"/api/v1/stock/{glass_item.id}",
            json={"currentQuantity": 5},
            headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["currentQuantity"] == 100

    def test_patch_duplicate_batch(self, client, auth_headers, glass_item, medicine_item):
        response = client.patch(
            f"/api/v1/stock/{glass_item.id}",
            json={"batchNumber": medicine_item.batch_number},
            headers=auth_headers
        )
        assert response.status_code == 409

    def test_delete_requires_manager(self, client, auth_headers, glass_item):
        response = client.delete(f"/api/v1/stock/{glass_item.id}", headers=auth_headers)
        assert response.status_code == 403

    def test_delete_unused_item(self, client, manager_headers, glass_item):
        response = client.delete(f"/api/v1/stock/{glass_item.id}", headers=manager_headers)
        assert response.status_code == 204

        response = client.get(f"/api/v1/stock/{glass_item.id}", headers=manager_headers)
        assert response.status_code == 404

    def test_delete_item_with_history(self, client, auth_headers, manager_headers, glass_item):
        client.post(f"/api/v1/stock/{glass_item.id}/issue", json={"quantity": 1}, headers=auth_headers)

        response = client.delete(f"/api/v1/stock/{glass_item.id}", headers=manager_headers)
        assert response.status_code == 409


class TestQuantityChanges:

    def test_issue(self, client, auth_headers, medicine_item):
        response = client.post(
            f"/api/v1/stock/{medicine_item.id}/issue",
            json={"quantity": 21, "prescriptionId": "RX-77", "issuedTo": "Patient B"},
            headers=auth_headers
        )

        assert response.status_code == 201
        data = response.json()
        assert data["quantity"] == 21
        assert data["issuedBy"] == "staff-1"
        assert data["status"] == "issued"
        assert data["issuanceNumber"].startswith("ISS-")

        item = client.get(f"/api/v1/stock/{medicine_item.id}", headers=auth_headers).json()
        assert item["currentQuantity"] == 479

    def test_issue_body_issuer_overrides_token(self, client, auth_headers, medicine_item):
        response = client.post(
            f"/api/v1/stock/{medicine_item.id}/issue",
            json={"quantity": 1, "issuedBy": "pharmacist-9"},
            headers=auth_headers
        )
        assert response.json()["issuedBy"] == "pharmacist-9"

    def test_issue_insufficient(self, client, auth_headers, make_item):
        item = make_item(current_quantity=5, original_quantity=20)

        response = client.post(
            f"/api/v1/stock/{item.id}/issue",
            json={"quantity": 10},
            headers=auth_headers
        )

        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "Insufficient stock. Available: 5, Requested: 10"
        assert body["details"]["available"] == 5
        assert body["details"]["requested"] == 10

        item_data = client.get(f"/api/v1/stock/{item.id}", headers=auth_headers).json()
        assert item_data["currentQuantity"] == 5

    def test_issue_zero_quantity(self, client, auth_headers, glass_item):
        response = client.post(
            f"/api/v1/stock/{glass_item.id}/issue",
            json={"quantity": 0},
            headers=auth_headers
        )
        assert response.status_code == 422

    def test_restock(self, client, auth_headers, glass_item):
        response = client.post(
            f"/api/v1/stock/{glass_item.id}/restock",
            json={"quantity": 20, "reason": "Delivery 88"},
            headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["currentQuantity"] == 120
        assert response.json()["originalQuantity"] == 120

    def test_adjust_requires_manager(self, client, auth_headers, glass_item):
        response = client.post(
            f"/api/v1/stock/{glass_item.id}/adjust",
            json={"newQuantity": 90},
            headers=auth_headers
        )
        assert response.status_code == 403

    def test_adjust(self, client, manager_headers, glass_item):
        response = client.post(
            f"/api/v1/stock/{glass_item.id}/adjust",
            json={"newQuantity": 90, "reason": "Stock take"},
            headers=manager_headers
        )

        assert response.status_code == 200
        assert response.json()["currentQuantity"] == 90

    def test_history(self, client, auth_headers, manager_headers, glass_item):
        client.post(f"/api/v1/stock/{glass_item.id}/issue", json={"quantity": 10}, headers=auth_headers)
        client.post(f"/api/v1/stock/{glass_item.id}/restock", json={"quantity": 4}, headers=auth_headers)
        client.post(f"/api/v1/stock/{glass_item.id}/adjust", json={"newQuantity": 94}, headers=manager_headers)

        response = client.get(f"/api/v1/stock/{glass_item.id}/history", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["item"]["currentQuantity"] == 94
        assert [e["entryType"] for e in data["entries"]] == ["issued", "restocked", "restocked"]
        assert data["entries"][2]["changedBy"] == "manager-1"
        assert [e["sequence"] for e in data["entries"]] == [1, 2, 3]
