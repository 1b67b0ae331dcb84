"""FastAPI routes for the Ordering domain: orders and payments."""

import json

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from ordering.api.auth import Caller, require_admin, require_caller
from ordering.api.schemas import (
    CheckoutResponse,
    LineItemResponse,
    OrderResponse,
    OrderSummaryResponse,
    PlaceOrderRequest,
    UpdateStatusRequest,
)
from ordering.config import PaymentSettings
from ordering.errors import InternalFailure, InvalidSignature, OrderNotFound
from ordering.gateway import PaymentNotification
from ordering.order.order import Order, OrderStatus
from ordering.order.placement import PlaceOrder
from ordering.order.status import UpdateOrderStatus, load_order
from ordering.payments.initiation import build_checkout
from ordering.payments.reconciliation import PaymentReconciliationGateway
from ordering.projections.order_summary import OrderSummary

logger = structlog.get_logger(__name__)


def _order_response(order: Order) -> OrderResponse:
    return OrderResponse(
        id=str(order.id),
        owner_id=str(order.owner_id),
        items=[
            LineItemResponse(
                product_id=str(item.product_id),
                title=item.title,
                unit_price=item.unit_price,
                quantity=item.quantity,
            )
            for item in order.items
        ],
        total_amount=order.total_amount,
        currency=order.currency,
        status=order.status,
        payment_status=order.payment_status,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


def _summary_response(summary: OrderSummary) -> OrderSummaryResponse:
    return OrderSummaryResponse(
        order_id=str(summary.order_id),
        owner_id=str(summary.owner_id),
        status=summary.status,
        payment_status=summary.payment_status,
        item_count=summary.item_count or 0,
        total_amount=summary.total_amount or 0.0,
        currency=summary.currency,
        placed_at=summary.placed_at,
        updated_at=summary.updated_at,
    )


def _load_visible_order(order_id: str, caller: Caller) -> Order:
    """Load an order the caller may see. Other callers' orders do not exist."""
    order = load_order(order_id)
    if not caller.can_access(order.owner_id):
        raise OrderNotFound(order_id)
    return order


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderResponse)
async def place_order(body: PlaceOrderRequest, caller: Caller = Depends(require_caller)) -> OrderResponse:
    command = PlaceOrder(
        owner_id=caller.account_id,
        items=json.dumps([item.model_dump() for item in body.items]),
        currency=PaymentSettings.from_env().currency,
    )
    order_id = current_domain.process(command, asynchronous=False)
    return _order_response(load_order(order_id))


@order_router.get("/mine", response_model=list[OrderSummaryResponse])
async def my_orders(caller: Caller = Depends(require_caller)) -> list[OrderSummaryResponse]:
    repo = current_domain.repository_for(OrderSummary)
    summaries = repo._dao.query.filter(owner_id=caller.account_id).order_by("-placed_at").all().items
    return [_summary_response(summary) for summary in summaries]


@order_router.get("", response_model=list[OrderSummaryResponse])
async def list_orders(
    status: str | None = None,
    caller: Caller = Depends(require_admin),
) -> list[OrderSummaryResponse]:
    query = current_domain.repository_for(OrderSummary)._dao.query
    if status:
        if status not in {s.value for s in OrderStatus}:
            raise ValidationError({"status": [f"Unknown order status: {status}"]})
        query = query.filter(status=status)
    summaries = query.order_by("-placed_at").all().items
    return [_summary_response(summary) for summary in summaries]


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, caller: Caller = Depends(require_caller)) -> OrderResponse:
    return _order_response(_load_visible_order(order_id, caller))


@order_router.put("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: str,
    body: UpdateStatusRequest,
    caller: Caller = Depends(require_admin),
) -> OrderResponse:
    command = UpdateOrderStatus(
        order_id=order_id,
        status=body.status,
        reason=body.reason,
    )
    current_domain.process(command, asynchronous=False)
    logger.info("Status updated by administrator", order_id=order_id, admin_id=caller.account_id)
    return _order_response(load_order(order_id))


# ---------------------------------------------------------------------------
# Payment Router
# ---------------------------------------------------------------------------
payment_router = APIRouter(prefix="/payments", tags=["payments"])


async def _notification_payload(request: Request) -> dict:
    """PayHere posts form data; JSON is accepted for replays and tooling."""
    if request.headers.get("content-type", "").startswith("application/json"):
        payload = await request.json()
        if not isinstance(payload, dict):
            raise ValueError("Notification body must be an object")
        return payload
    return dict(await request.form())


# Declared before /payhere/{order_id} so "notify" is never taken for an order id
@payment_router.post("/payhere/notify", response_class=PlainTextResponse)
async def payhere_notify(request: Request) -> PlainTextResponse:
    try:
        payload = await _notification_payload(request)
    except ValueError:
        logger.warning("Unreadable payment notification")
        return PlainTextResponse("Rejected", status_code=400)

    notification = PaymentNotification(
        merchant_id=str(payload.get("merchant_id", "")),
        order_id=str(payload.get("order_id", "")),
        amount=str(payload.get("payhere_amount", "")),
        currency=str(payload.get("payhere_currency", "")),
        status_code=str(payload.get("status_code", "")),
        signature=str(payload.get("md5sig", "")),
    )

    try:
        PaymentReconciliationGateway().reconcile(notification)
    except InvalidSignature:
        return PlainTextResponse("Invalid signature", status_code=400)
    except OrderNotFound:
        logger.warning("Payment notification for unknown order", order_id=notification.order_id)
        return PlainTextResponse("Order not found", status_code=404)
    except ValidationError as exc:
        logger.warning(
            "Payment notification rejected",
            order_id=notification.order_id,
            status_code=notification.status_code,
            errors=exc.messages,
        )
        return PlainTextResponse("Rejected", status_code=400)
    except InternalFailure:
        return PlainTextResponse("ERROR", status_code=500)

    return PlainTextResponse("OK")


@payment_router.post("/payhere/{order_id}", response_model=CheckoutResponse)
async def initiate_payhere(order_id: str, caller: Caller = Depends(require_caller)) -> CheckoutResponse:
    order = _load_visible_order(order_id, caller)
    return CheckoutResponse(**build_checkout(order, email=caller.email))
