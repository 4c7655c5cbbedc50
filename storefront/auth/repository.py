from typing import Optional
from sqlalchemy import select
from storefront.schema.full_schema import Orders


async def latest_order_by_phone(session, phone_norm: str) -> Optional[Orders]:
    stmt = (select(Orders)
            .where(Orders.customer_phone_norm == phone_norm)
            .order_by(Orders.created_at.desc(), Orders.id.desc())
            .limit(1))
    res = await session.execute(stmt)
    return res.scalars().first()


async def latest_order_by_federated_uid(session, uid: str) -> Optional[Orders]:
    stmt = (select(Orders)
            .where(Orders.federated_uid == uid)
            .order_by(Orders.created_at.desc(), Orders.id.desc())
            .limit(1))
    res = await session.execute(stmt)
    return res.scalars().first()
