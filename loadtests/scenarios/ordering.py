"""Ordering load test scenarios.

Three stateful SequentialTaskSet journeys: the paid order lifecycle with a
redelivered provider notification, cancellation with stock restore, and
a contention journey where every user orders the same product.
"""

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import (
    admin_headers,
    customer_headers,
    hot_product_id,
    order_data,
    payhere_notification,
    single_item_order,
)
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import OrderState


class _OrderJourney(SequentialTaskSet):
    def on_start(self):
        self.state = OrderState(headers=customer_headers())

    def _place(self, payload):
        with self.client.post(
            "/orders",
            json=payload,
            headers=self.state.headers,
            catch_response=True,
            name="POST /orders",
        ) as resp:
            if resp.status_code == 201:
                body = resp.json()
                self.state.order_id = body["id"]
                self.state.amount = f"{body['total_amount']:.2f}"
                self.state.currency = body["currency"]
            elif resp.status_code == 409:
                # Out of stock is an expected outcome under load
                resp.success()
                self.interrupt()
            else:
                resp.failure(f"Place order failed: {resp.status_code} - {extract_error_detail(resp)}")
                self.interrupt()

    def _set_status(self, status, reason=None):
        with self.client.put(
            f"/orders/{self.state.order_id}/status",
            json={"status": status, "reason": reason},
            headers=admin_headers(),
            catch_response=True,
            name="PUT /orders/{id}/status",
        ) as resp:
            if resp.status_code == 200:
                self.state.current_status = status
            else:
                resp.failure(f"Set {status} failed: {resp.status_code} - {extract_error_detail(resp)}")


class PaidOrderJourney(_OrderJourney):
    """Place Order -> Start Checkout -> Notify -> Notify Again -> Ship.

    The second notification models the provider's at-least-once delivery
    and must be acknowledged without a second settlement.
    """

    @task
    def place_order(self):
        self._place(order_data())

    @task
    def start_checkout(self):
        with self.client.post(
            f"/payments/payhere/{self.state.order_id}",
            headers=self.state.headers,
            catch_response=True,
            name="POST /payments/payhere/{id}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Checkout failed: {resp.status_code} - {extract_error_detail(resp)}")
                self.interrupt()

    def _notify(self, name):
        with self.client.post(
            "/payments/payhere/notify",
            data=payhere_notification(self.state.order_id, self.state.amount, self.state.currency),
            catch_response=True,
            name=name,
        ) as resp:
            if resp.status_code == 200:
                self.state.current_status = "CONFIRMED"
            else:
                resp.failure(f"Notify failed: {resp.status_code} - {resp.text[:200]}")
                self.interrupt()

    @task
    def notify_paid(self):
        self._notify("POST /payments/payhere/notify")

    @task
    def notify_paid_again(self):
        self._notify("POST /payments/payhere/notify (redelivery)")

    @task
    def view_order(self):
        with self.client.get(
            f"/orders/{self.state.order_id}",
            headers=self.state.headers,
            catch_response=True,
            name="GET /orders/{id}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"View order failed: {extract_error_detail(resp)}")
            elif resp.json()["payment_status"] != "PAID":
                resp.failure("Order not marked paid after settlement")

    @task
    def ship(self):
        self._set_status("SHIPPED")

    @task
    def done(self):
        self.interrupt()


class CancelledOrderJourney(_OrderJourney):
    """Place Order -> List Mine -> Cancel.

    Cancellation puts every line's quantity back on the shelf.
    """

    @task
    def place_order(self):
        self._place(order_data(max_lines=2))

    @task
    def list_mine(self):
        with self.client.get(
            "/orders/mine",
            headers=self.state.headers,
            catch_response=True,
            name="GET /orders/mine",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"List mine failed: {extract_error_detail(resp)}")

    @task
    def cancel(self):
        self._set_status("CANCELLED", reason="Changed my mind")

    @task
    def done(self):
        self.interrupt()


class HotProductJourney(_OrderJourney):
    """Every user orders one unit of the same product, then cancels it.

    Stock must never go negative; 409 responses once the shelf is empty
    are counted as successes.
    """

    @task
    def place_order(self):
        self._place(single_item_order(hot_product_id()))

    @task
    def cancel(self):
        self._set_status("CANCELLED", reason="Load test release")

    @task
    def done(self):
        self.interrupt()


class OrderingUser(HttpUser):
    """Locust user simulating ordering interactions.

    Weighted distribution:
    - 60% Paid order lifecycle (happy path + redelivery)
    - 40% Cancellation
    """

    wait_time = between(0.5, 2.0)
    tasks = {
        PaidOrderJourney: 3,
        CancelledOrderJourney: 2,
    }


class StockContentionUser(HttpUser):
    """Locust user hammering a single product's stock."""

    wait_time = between(0.1, 0.5)
    tasks = [HotProductJourney]
