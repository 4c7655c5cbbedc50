import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from storefront.auth.identity import IdentityVerifier
from storefront.auth.utils import hash_phone, hash_pin, is_valid_pin, validate_phone
from storefront.common.custom_exceptions import (InvalidTotals, InvalidTransition, OrderNotFound,
                                                 ProductNotFound, StorefrontError)
from storefront.common.retries import is_recoverable_or_conflict, retry_transaction
from storefront.common.utils import isoformat_or_none, now
from storefront.orders.constants import SALE_CATEGORY, logger
from storefront.orders.models import CheckoutIn
from storefront.orders.repository import get_cash_movement, get_order, insert_order_with_items, products_by_ids
from storefront.orders.utils import build_items_summary, compute_order_totals, item_custom_text, resolve_custom_text
from storefront.schema.full_schema import CashMovement, MovementType, OrderItem, Orders, OrderStatus, sale_movement_key


class InvalidCheckout(StorefrontError):
    code = "INVALID_CHECKOUT"
    default_message = "Invalid checkout data"


# ---------------------------------------------------------------- checkout

async def create_order(session, payload: CheckoutIn, verifier: Optional[IdentityVerifier] = None) -> Orders:
    name = payload.name.strip()
    if not name:
        raise InvalidCheckout("Name is required")
    digits = validate_phone(payload.phone)
    if digits is None:
        raise InvalidCheckout("Invalid phone number")
    pin = (payload.pin or "").strip()
    if not is_valid_pin(pin):
        raise InvalidCheckout("PIN must have 4 digits")

    products = await products_by_ids(session, [it.productId for it in payload.items])

    lines = []
    items: List[OrderItem] = []
    for it in payload.items:
        product = products.get(it.productId)
        if product is None or not product.active:
            raise ProductNotFound(f"Product {it.productId} is not available")
        raw = it.model_dump()
        custom = resolve_custom_text(raw)
        extras = {k: v for k, v in raw.items() if k not in ("productId", "qty") and v is not None}
        lines.append({"qty": it.qty, "unit_price": product.sale_price, "unit_cost": product.unit_cost})
        items.append(OrderItem(product_id=product.id, name_snapshot=product.name, qty=it.qty,
                               unit_price_snapshot=product.sale_price, unit_cost_snapshot=product.unit_cost,
                               custom_text=custom, attributes=extras or None))

    totals = compute_order_totals(lines)

    federated_uid, federated_email = None, None
    if payload.idToken and verifier is not None:
        identity = verifier.verify(payload.idToken)
        if identity is not None:
            federated_uid, federated_email = identity.subject_id, identity.email
        else:
            logger.warning("orders.checkout.id_token_rejected")

    ts = now()
    order = Orders(status=OrderStatus.PENDING, customer_name=name, customer_phone=payload.phone.strip(),
                   customer_phone_norm=digits, customer_phone_hash=hash_phone(digits),
                   federated_uid=federated_uid, federated_email=federated_email,
                   pin_hash=hash_pin(pin), created_at=ts, updated_at=ts, **totals)
    await insert_order_with_items(session, order, items)

    logger.info("orders.checkout.created", extra={"order_id": order.id, "revenue": totals["revenue"],
                                                  "item_count": len(items)})
    return order


# ---------------------------------------------------------------- payment

@dataclass(frozen=True)
class MarkPaidResult:
    order_id: str
    changed: bool


def _valid_revenue(value: Any) -> bool:
    return (isinstance(value, (int, float)) and not isinstance(value, bool)
            and math.isfinite(value) and value > 0)


@retry_transaction(attempts=5, base_delay=0.02, if_retryable=is_recoverable_or_conflict)
async def mark_order_paid(session_factory, order_id: str) -> MarkPaidResult:
    """pending -> paid, recording the sale in the cash ledger exactly once.

    Order read, ledger entry and status write share one transaction. A racing call either
    waits on the row lock or loses on the ledger key; its retry then sees the order paid.
    """
    async with session_factory() as session:
        async with session.begin():
            order = await get_order(session, order_id, for_update=True)
            if order is None:
                raise OrderNotFound()

            if order.status in (OrderStatus.PAID, OrderStatus.DELIVERED):
                logger.info("orders.mark_paid.noop", extra={"order_id": order_id, "status": order.status.value})
                return MarkPaidResult(order_id=order_id, changed=False)
            if order.status == OrderStatus.CANCELLED:
                raise InvalidTransition("Cancelled orders cannot be paid")
            if not _valid_revenue(order.revenue):
                raise InvalidTotals()

            ts = now()
            key = sale_movement_key(order_id)
            if await get_cash_movement(session, key) is None:
                summary = build_items_summary(order.items, with_custom=False)
                session.add(CashMovement(
                    id=key, type=MovementType.IN, category=SALE_CATEGORY, amount=order.revenue,
                    items_summary=summary,
                    note=f"Sale: {summary}" if summary else f"Sale for order {order_id}",
                    order_id=order_id, occurred_at=ts, created_at=ts,
                ))

            order.status = OrderStatus.PAID
            order.paid_at = ts
            order.updated_at = ts

    logger.info("orders.mark_paid.success", extra={"order_id": order_id})
    return MarkPaidResult(order_id=order_id, changed=True)


# ---------------------------------------------------------------- fulfilment

async def _transition(session, order_id: str, *, source: OrderStatus, target: OrderStatus, stamp: str) -> Orders:
    order = await get_order(session, order_id, for_update=True)
    if order is None:
        raise OrderNotFound()
    if order.status == target:
        return order
    if order.status != source:
        raise InvalidTransition(f"Order is {order.status.value}, expected {source.value}")

    ts = now()
    order.status = target
    setattr(order, stamp, ts)
    order.updated_at = ts
    logger.info("orders.status.changed", extra={"order_id": order_id, "status": target.value})
    return order


async def mark_delivered(session, order_id: str) -> Orders:
    return await _transition(session, order_id, source=OrderStatus.PAID,
                             target=OrderStatus.DELIVERED, stamp="delivered_at")


async def cancel_order(session, order_id: str) -> Orders:
    return await _transition(session, order_id, source=OrderStatus.PENDING,
                             target=OrderStatus.CANCELLED, stamp="cancelled_at")


# ---------------------------------------------------------------- views

def order_summary(order: Orders) -> Dict[str, Any]:
    items = [{"nameSnapshot": it.name_snapshot, "qty": it.qty, "customText": item_custom_text(it)}
             for it in order.items]
    return {
        "id": order.id,
        "status": order.status.value,
        "itemsSummary": build_items_summary(order.items) or "Order items",
        "items": items,
        "total": order.revenue,
        "customerName": order.customer_name,
        "createdAt": isoformat_or_none(order.created_at),
        "paidAt": isoformat_or_none(order.paid_at),
        "deliveredAt": isoformat_or_none(order.delivered_at),
    }


def order_detail(order: Orders) -> Dict[str, Any]:
    detail = order_summary(order)
    detail["items"] = [{
        "productId": it.product_id,
        "nameSnapshot": it.name_snapshot,
        "qty": it.qty,
        "unitPrice": it.unit_price_snapshot,
        "unitCost": it.unit_cost_snapshot,
        "customText": item_custom_text(it),
    } for it in order.items]
    detail.update({
        "customerPhone": order.customer_phone,
        "federatedEmail": order.federated_email,
        "totals": {"revenue": order.revenue, "cost": order.cost, "profit": order.profit},
        "updatedAt": isoformat_or_none(order.updated_at),
        "cancelledAt": isoformat_or_none(order.cancelled_at),
    })
    return detail
