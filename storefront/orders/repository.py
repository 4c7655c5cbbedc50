from typing import List, Optional, Sequence
from sqlalchemy import select
from sqlalchemy.orm import selectinload
from storefront.schema.full_schema import CashMovement, OrderItem, Orders, OrderStatus, Product


async def get_order(session, order_id: str, *, for_update: bool = False) -> Optional[Orders]:
    stmt = select(Orders).options(selectinload(Orders.items)).where(Orders.id == order_id)
    if for_update:
        # row lock on backends that have one; sqlite ignores it
        stmt = stmt.with_for_update(of=Orders)
    res = await session.execute(stmt)
    return res.scalars().first()


async def list_orders(session, status: Optional[OrderStatus] = None, limit: int = 200) -> List[Orders]:
    stmt = select(Orders).options(selectinload(Orders.items))
    if status is not None:
        stmt = stmt.where(Orders.status == status)
    stmt = stmt.order_by(Orders.created_at.desc(), Orders.id.desc()).limit(limit)
    res = await session.execute(stmt)
    return list(res.scalars().all())


async def products_by_ids(session, product_ids: Sequence[str]) -> dict:
    if not product_ids:
        return {}
    stmt = select(Product).where(Product.id.in_(list(set(product_ids))))
    res = await session.execute(stmt)
    return {p.id: p for p in res.scalars().all()}


async def insert_order_with_items(session, order: Orders, items: List[OrderItem]) -> Orders:
    session.add(order)
    await session.flush()
    for item in items:
        item.order_id = order.id
        session.add(item)
    await session.flush()
    return order


async def get_cash_movement(session, movement_id: str) -> Optional[CashMovement]:
    return await session.get(CashMovement, movement_id)
