"""Faker-based data generators for Locust load test scenarios.

Payloads match the field names expected by the API's Pydantic request
schemas. Products are not created over HTTP; seed them first with
``python src/manage.py seed-products`` and list their ids in
``LOADTEST_PRODUCT_IDS``.
"""

import hashlib
import os
import random
import uuid

from faker import Faker

fake = Faker()

DEFAULT_PRODUCT_IDS = "candle-lavender,candle-vanilla,candle-sandalwood"


def product_ids() -> list[str]:
    raw = os.getenv("LOADTEST_PRODUCT_IDS", DEFAULT_PRODUCT_IDS)
    return [pid.strip() for pid in raw.split(",") if pid.strip()]


def hot_product_id() -> str:
    """The single product every contention user fights over."""
    return os.getenv("LOADTEST_HOT_PRODUCT_ID", product_ids()[0])


# ---------- Callers ----------


def customer_headers() -> dict:
    return {
        "X-Account-Id": f"cust-lt-{uuid.uuid4().hex[:8]}",
        "X-Account-Role": "customer",
        "X-Account-Email": fake.email(),
    }


def admin_headers() -> dict:
    return {
        "X-Account-Id": "admin-lt",
        "X-Account-Role": "admin",
    }


# ---------- Orders ----------


def order_data(max_lines: int = 3) -> dict:
    """Cart with distinct products and small quantities."""
    chosen = random.sample(product_ids(), k=min(max_lines, len(product_ids())))
    return {"items": [{"product_id": pid, "quantity": random.randint(1, 2)} for pid in chosen]}


def single_item_order(product_id: str) -> dict:
    return {"items": [{"product_id": product_id, "quantity": 1}]}


# ---------- PayHere notifications ----------


def _md5_upper(value: str) -> str:
    return hashlib.md5(value.encode("utf-8")).hexdigest().upper()


def payhere_notification(order_id: str, amount: str, currency: str, status_code: str = "2") -> dict:
    """Form payload signed with the merchant secret the target runs with."""
    merchant_id = os.getenv("PAYHERE_MERCHANT_ID", "")
    secret = os.getenv("PAYHERE_MERCHANT_SECRET", "")
    return {
        "merchant_id": merchant_id,
        "order_id": order_id,
        "payhere_amount": amount,
        "payhere_currency": currency,
        "status_code": status_code,
        "md5sig": _md5_upper(merchant_id + order_id + amount + currency + status_code + _md5_upper(secret)),
    }
