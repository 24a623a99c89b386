"""
HTTP-level tests: each service app wired to the fake producer
"""
import json

import pytest
from aiokafka.errors import KafkaConnectionError

from main import create_app

PRODUCT_BODY = {
    "seller_id": "s1",
    "name": "Trail Shoe",
    "description": "Lightweight trail shoe",
    "category": "footwear",
    "base_price": 89.5,
    "variants": [{"name": "EU 42", "sku": "TS-42", "stock": 5}],
}

ORDER_BODY = {
    "buyer_id": "b1",
    "items": [{"product_id": "p1", "variant_id": "v1", "quantity": 2, "price": 10.0, "seller_id": "s1"}],
}


class TestAuthServiceAPI:

    def test_register_publishes_with_request_correlation_id(self, make_client, fake_producer):
        client = make_client("auth-service")

        response = client.post(
            "/v1/users/register",
            json={"email": "ada@example.com", "password": "s3cret-pass", "name": "Ada", "role": "buyer"},
            headers={"X-Correlation-ID": "corr-123"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["success"] is True
        assert data["event"] == "success"
        assert "hashed_password" not in data["data"]
        assert response.headers["X-Correlation-ID"] == "corr-123"

        sent = fake_producer.sent[0]
        assert sent.topic == "user.registered"
        assert sent.key == data["data"]["id"].encode()
        assert sent.header_map["correlationId"] == "corr-123"
        assert sent.header_map["producer"] == "auth-service"

    def test_registration_succeeds_degraded_when_broker_is_down(self, make_client):
        client = make_client("auth-service", connected=False)

        response = client.post(
            "/v1/users/register",
            json={"email": "ada@example.com", "password": "s3cret-pass", "name": "Ada", "role": "buyer"},
        )

        assert response.status_code == 201
        assert response.json()["event"] == "degraded"

    def test_validation_failure(self, make_client, fake_producer):
        client = make_client("auth-service")

        response = client.post("/v1/users/register", json={"email": "not-an-email", "password": "x", "role": "admin"})

        assert response.status_code == 400
        data = response.json()
        assert data["error_code"] == "VALIDATION_ERROR"
        assert {error["field"] for error in data["errors"]} == {"email", "password", "name", "role"}
        assert fake_producer.sent == []

    def test_duplicate_email(self, make_client):
        client = make_client("auth-service")
        body = {"email": "ada@example.com", "password": "s3cret-pass", "name": "Ada", "role": "buyer"}
        client.post("/v1/users/register", json=body)

        response = client.post("/v1/users/register", json=body)

        assert response.status_code == 409
        assert response.json()["error_code"] == "CONFLICT_ERROR"

    def test_get_update_delete(self, make_client, fake_producer):
        client = make_client("auth-service")
        user_id = client.post(
            "/v1/users/register",
            json={"email": "ada@example.com", "password": "s3cret-pass", "name": "Ada", "role": "buyer"},
        ).json()["data"]["id"]

        assert client.get(f"/v1/users/{user_id}").json()["data"]["email"] == "ada@example.com"

        patched = client.patch(f"/v1/users/{user_id}", json={"name": "Ada L"})
        assert patched.status_code == 200
        assert json.loads(fake_producer.sent[-1].value)["payload"]["changes"] == {"name": "Ada L"}

        assert client.delete(f"/v1/users/{user_id}").status_code == 200
        assert client.get(f"/v1/users/{user_id}").status_code == 404
        assert [sent.topic for sent in fake_producer.sent] == ["user.registered", "user.updated", "user.deleted"]


class TestProductServiceAPI:

    def _create_product(self, client):
        return client.post("/v1/products", json=PRODUCT_BODY).json()["data"]

    def test_create_and_get(self, make_client, fake_producer):
        client = make_client("product-service")

        product = self._create_product(client)

        assert product["total_stock"] == 5
        assert client.get(f"/v1/products/{product['id']}").json()["data"]["name"] == "Trail Shoe"
        assert fake_producer.sent[0].header_map["producer"] == "product-service"

    def test_update_by_another_seller_is_forbidden(self, make_client):
        client = make_client("product-service")
        product = self._create_product(client)

        response = client.put(f"/v1/products/{product['id']}", json={"seller_id": "s2", "name": "Mine now"})

        assert response.status_code == 403
        assert response.json()["error_code"] == "AUTHORIZATION_ERROR"

    def test_deduct_and_restore_stock(self, make_client, fake_producer):
        client = make_client("product-service")
        product = self._create_product(client)
        change = {"variant_id": product["variants"][0]["id"], "quantity": 3, "order_id": "o1"}

        deducted = client.post(f"/v1/products/{product['id']}/stock/deduct", json=change)
        assert deducted.status_code == 200
        assert deducted.json()["data"]["total_stock"] == 2

        restored = client.post(f"/v1/products/{product['id']}/stock/restore", json=change)
        assert restored.json()["data"]["total_stock"] == 5
        assert [sent.topic for sent in fake_producer.sent][-2:] == ["product.stock.deducted", "product.stock.restored"]

    def test_insufficient_stock(self, make_client):
        client = make_client("product-service")
        product = self._create_product(client)

        response = client.post(
            f"/v1/products/{product['id']}/stock/deduct",
            json={"variant_id": product["variants"][0]["id"], "quantity": 50, "order_id": "o1"},
        )

        assert response.status_code == 409

    def test_stock_deduction_fails_visibly_when_event_cannot_be_sent(self, make_client, fake_producer):
        client = make_client("product-service")
        product = self._create_product(client)
        fake_producer.send_error = KafkaConnectionError()

        response = client.post(
            f"/v1/products/{product['id']}/stock/deduct",
            json={"variant_id": product["variants"][0]["id"], "quantity": 3, "order_id": "o1"},
            headers={"X-Correlation-ID": "corr-stock"},
        )

        assert response.status_code == 503
        data = response.json()
        assert data["success"] is False
        assert data["error_code"] == "EVENT_PUBLISH_FAILED"
        assert data["correlation_id"] == "corr-stock"

        fake_producer.send_error = None
        assert client.get(f"/v1/products/{product['id']}").json()["data"]["total_stock"] == 5

    def test_stock_deduction_without_broker_is_unavailable(self, make_client):
        client = make_client("product-service", connected=False)
        product = self._create_product(client)

        response = client.post(
            f"/v1/products/{product['id']}/stock/deduct",
            json={"variant_id": product["variants"][0]["id"], "quantity": 1, "order_id": "o1"},
        )

        assert response.status_code == 503
        assert response.json()["error_code"] == "EVENT_PUBLISH_UNAVAILABLE"

    def test_unknown_product(self, make_client):
        client = make_client("product-service")
        response = client.get("/v1/products/missing")
        assert response.status_code == 404
        assert response.json()["error_code"] == "NOT_FOUND"


class TestOrderServiceAPI:

    def test_order_lifecycle(self, make_client, fake_producer):
        client = make_client("order-service")

        created = client.post("/v1/orders", json=ORDER_BODY)
        assert created.status_code == 201
        order = created.json()["data"]
        assert order["status"] == "pending"
        assert order["total_amount"] == 20.0

        confirmed = client.patch(f"/v1/orders/{order['id']}/status", json={"seller_id": "s1", "status": "confirmed"})
        assert confirmed.json()["data"]["status"] == "confirmed"

        cancelled = client.post(f"/v1/orders/{order['id']}/cancel", json={"buyer_id": "b1"})
        assert cancelled.json()["data"]["status"] == "cancelled"

        assert [sent.topic for sent in fake_producer.sent] == [
            "order.created", "order.status.updated", "order.cancelled",
        ]

    def test_invalid_status_value(self, make_client):
        client = make_client("order-service")
        order = client.post("/v1/orders", json=ORDER_BODY).json()["data"]

        response = client.patch(f"/v1/orders/{order['id']}/status", json={"seller_id": "s1", "status": "lost"})

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "status"

    def test_order_creation_without_broker_leaves_no_order(self, make_client):
        client = make_client("order-service", connected=False)

        response = client.post("/v1/orders", json=ORDER_BODY)

        assert response.status_code == 503
        assert response.json()["error_code"] == "EVENT_PUBLISH_UNAVAILABLE"

    def test_cancel_by_someone_else(self, make_client):
        client = make_client("order-service")
        order = client.post("/v1/orders", json=ORDER_BODY).json()["data"]

        response = client.post(f"/v1/orders/{order['id']}/cancel", json={"buyer_id": "b2"})

        assert response.status_code == 403


class TestHealth:

    def test_ready_when_connected(self, make_client):
        client = make_client("order-service")

        assert client.get("/health/live").status_code == 200
        ready = client.get("/health/ready")
        assert ready.status_code == 200
        assert ready.json()["kafka"]["state"] == "connected"

    def test_not_ready_without_broker(self, make_client):
        client = make_client("order-service", connected=False)

        assert client.get("/health/live").status_code == 200
        ready = client.get("/health/ready")
        assert ready.status_code == 503
        assert ready.json()["status"] == "unhealthy"

    def test_producer_is_stopped_on_shutdown(self, fake_producer):
        from fastapi.testclient import TestClient

        app = create_app("auth-service", producer_factory=lambda: fake_producer, require_broker=False)
        with TestClient(app):
            assert fake_producer.started

        assert fake_producer.stop_calls == 1

    def test_required_broker_fails_startup(self, fake_producer):
        from fastapi.testclient import TestClient
        from core.events import BrokerConnectionError

        fake_producer.start_error = KafkaConnectionError()
        app = create_app("auth-service", producer_factory=lambda: fake_producer, require_broker=True)

        with pytest.raises(BrokerConnectionError):
            with TestClient(app):
                pass

    def test_unknown_service_name(self):
        with pytest.raises(ValueError):
            create_app("billing-service")
