"""Integration tests for the PayHere payment endpoints via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from ordering.api import order_router, payment_router, register_exception_handlers
from protean import current_domain

CUSTOMER = {"X-Account-Id": "acct-001", "X-Account-Email": "buyer@example.com"}
ADMIN = {"X-Account-Id": "admin-001", "X-Account-Role": "admin"}


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(order_router)
    app.include_router(payment_router)
    register_exception_handlers(app)
    return TestClient(app)


@pytest.fixture()
def order_id(client, register_product):
    register_product("P1", price=500.0, stock=5)
    response = client.post("/orders", json={"items": [{"productId": "P1", "quantity": 2}]}, headers=CUSTOMER)
    return response.json()["id"]


def _form(notification):
    return {
        "merchant_id": notification.merchant_id,
        "order_id": notification.order_id,
        "payhere_amount": notification.amount,
        "payhere_currency": notification.currency,
        "status_code": notification.status_code,
        "md5sig": notification.signature,
    }


def _order(client, order_id):
    return client.get(f"/orders/{order_id}", headers=ADMIN).json()


class TestInitiatePayment:
    def test_owner_gets_signed_checkout(self, client, order_id):
        response = client.post(f"/payments/payhere/{order_id}", headers=CUSTOMER)

        assert response.status_code == 200
        body = response.json()
        assert body["order_id"] == order_id
        assert body["amount"] == "1000.00"
        assert body["email"] == "buyer@example.com"
        assert len(body["hash"]) == 32

    def test_other_customer_cannot_initiate(self, client, order_id):
        response = client.post(f"/payments/payhere/{order_id}", headers={"X-Account-Id": "acct-999"})
        assert response.status_code == 404

    def test_unknown_order(self, client):
        assert client.post("/payments/payhere/ord-missing", headers=ADMIN).status_code == 404

    def test_paid_order_cannot_initiate_again(self, client, order_id, notification):
        client.post("/payments/payhere/notify", data=_form(notification(order_id, "1000.00")))
        response = client.post(f"/payments/payhere/{order_id}", headers=CUSTOMER)
        assert response.status_code == 409


class TestNotify:
    def test_form_notification_settles_order(self, client, order_id, notification):
        response = client.post("/payments/payhere/notify", data=_form(notification(order_id, "1000.00")))

        assert response.status_code == 200
        assert response.text == "OK"
        order = _order(client, order_id)
        assert order["status"] == "CONFIRMED"
        assert order["payment_status"] == "PAID"

    def test_json_notification_is_accepted(self, client, order_id, notification):
        response = client.post("/payments/payhere/notify", json=_form(notification(order_id, "1000.00")))
        assert response.status_code == 200
        assert _order(client, order_id)["payment_status"] == "PAID"

    def test_duplicate_delivery_still_ok_without_new_events(self, client, order_id, notification):
        form = _form(notification(order_id, "1000.00"))
        client.post("/payments/payhere/notify", data=form)
        events_before = len(current_domain.event_store.store.read(f"ordering::order-{order_id}"))

        response = client.post("/payments/payhere/notify", data=form)

        assert response.status_code == 200
        assert response.text == "OK"
        assert len(current_domain.event_store.store.read(f"ordering::order-{order_id}")) == events_before

    def test_tampered_notification_is_rejected(self, client, order_id, notification):
        form = _form(notification(order_id, "1000.00"))
        form["payhere_amount"] = "1.00"

        response = client.post("/payments/payhere/notify", data=form)

        assert response.status_code == 400
        assert response.text == "Invalid signature"
        order = _order(client, order_id)
        assert order["status"] == "PENDING"
        assert order["payment_status"] == "UNPAID"

    def test_missing_fields_fail_verification(self, client, order_id):
        response = client.post("/payments/payhere/notify", data={"order_id": order_id, "status_code": "2"})
        assert response.status_code == 400
        assert response.text == "Invalid signature"

    def test_unknown_order_is_404(self, client, notification):
        response = client.post("/payments/payhere/notify", data=_form(notification("ord-unknown", "1000.00")))
        assert response.status_code == 404
        assert response.text == "Order not found"

    def test_failure_code_is_recorded_not_settled(self, client, order_id, notification):
        response = client.post(
            "/payments/payhere/notify",
            data=_form(notification(order_id, "1000.00", status_code="-2")),
        )
        assert response.status_code == 200
        order = _order(client, order_id)
        assert order["status"] == "PENDING"
        assert order["payment_status"] == "UNPAID"

    def test_amount_mismatch_is_rejected(self, client, order_id, notification):
        response = client.post("/payments/payhere/notify", data=_form(notification(order_id, "999.00")))
        assert response.status_code == 400
        assert response.text == "Rejected"
        assert _order(client, order_id)["payment_status"] == "UNPAID"

    def test_malformed_json_is_rejected(self, client):
        response = client.post(
            "/payments/payhere/notify",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.text == "Rejected"

    def test_paid_order_cannot_be_cancelled_via_api(self, client, order_id, notification):
        client.post("/payments/payhere/notify", data=_form(notification(order_id, "1000.00")))

        response = client.put(f"/orders/{order_id}/status", json={"status": "CANCELLED"}, headers=ADMIN)

        assert response.status_code == 409
        assert _order(client, order_id)["status"] == "CONFIRMED"
