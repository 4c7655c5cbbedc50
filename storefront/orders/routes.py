from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from storefront.auth.dependencies import identity_verifier, require_admin, session_codec
from storefront.auth.models import Privileged
from storefront.auth.routes import set_session_cookie
from storefront.auth.session import SessionCodec
from storefront.common.custom_exceptions import OrderNotFound
from storefront.common.utils import success_response
from storefront.db.dependencies import get_session, get_session_factory
from storefront.orders.constants import logger
from storefront.orders.models import CheckoutIn
from storefront.orders.repository import get_order, list_orders
from storefront.orders.services import (cancel_order, create_order, mark_delivered, mark_order_paid,
                                        order_detail, order_summary)
from storefront.schema.full_schema import OrderStatus

orders_public_router = APIRouter()
orders_admin_router = APIRouter()


@orders_public_router.post("/checkout", status_code=status.HTTP_201_CREATED)
async def checkout(payload: CheckoutIn,
                   session: AsyncSession = Depends(get_session),
                   codec: SessionCodec = Depends(session_codec)):

    order = await create_order(session, payload, identity_verifier())
    await session.commit()

    token = codec.sign(order.id, order.customer_phone_norm, include_phone_hash=True)
    response = success_response({
        "orderId": order.id,
        "totals": {"revenue": order.revenue, "cost": order.cost, "profit": order.profit},
    }, status_code=status.HTTP_201_CREATED)
    set_session_cookie(response, token)
    return response


@orders_admin_router.get("/")
async def admin_list_orders(status_filter: Optional[OrderStatus] = Query(default=None, alias="status"),
                            session: AsyncSession = Depends(get_session),
                            admin: Privileged = Depends(require_admin)):
    orders = await list_orders(session, status_filter)
    return success_response({"orders": [order_summary(o) for o in orders]})


@orders_admin_router.get("/{order_id}")
async def admin_get_order(order_id: str,
                          session: AsyncSession = Depends(get_session),
                          admin: Privileged = Depends(require_admin)):
    order = await get_order(session, order_id)
    if order is None:
        raise OrderNotFound()
    return success_response({"order": order_detail(order)})


@orders_admin_router.post("/{order_id}/mark-paid")
async def admin_mark_paid(order_id: str,
                          session_maker=Depends(get_session_factory),
                          admin: Privileged = Depends(require_admin)):
    logger.info("orders.mark_paid.attempt", extra={"order_id": order_id, "subject_id": admin.subject_id})
    result = await mark_order_paid(session_maker, order_id.strip())
    return success_response({"orderId": result.order_id})


@orders_admin_router.post("/{order_id}/mark-delivered")
async def admin_mark_delivered(order_id: str,
                               session: AsyncSession = Depends(get_session),
                               admin: Privileged = Depends(require_admin)):
    order = await mark_delivered(session, order_id)
    await session.commit()
    return success_response({"orderId": order.id, "status": order.status.value})


@orders_admin_router.post("/{order_id}/cancel")
async def admin_cancel_order(order_id: str,
                             session: AsyncSession = Depends(get_session),
                             admin: Privileged = Depends(require_admin)):
    order = await cancel_order(session, order_id)
    await session.commit()
    return success_response({"orderId": order.id, "status": order.status.value})
