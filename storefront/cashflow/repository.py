from datetime import datetime
from typing import Dict, List, Optional
from sqlalchemy import case, func, select
from storefront.schema.full_schema import CashMovement, MovementType


async def movements_between(session, start: datetime, end: datetime) -> List[CashMovement]:
    stmt = (select(CashMovement)
            .where(CashMovement.occurred_at >= start, CashMovement.occurred_at < end)
            .order_by(CashMovement.occurred_at.desc(), CashMovement.created_at.desc()))
    res = await session.execute(stmt)
    return list(res.scalars().all())


async def summarize(session, start: Optional[datetime] = None, end: Optional[datetime] = None) -> Dict[str, int]:
    total_in = func.coalesce(func.sum(case((CashMovement.type == MovementType.IN, CashMovement.amount), else_=0)), 0)
    total_out = func.coalesce(func.sum(case((CashMovement.type == MovementType.OUT, CashMovement.amount), else_=0)), 0)
    stmt = select(total_in.label("total_in"), total_out.label("total_out"))
    if start is not None:
        stmt = stmt.where(CashMovement.occurred_at >= start)
    if end is not None:
        stmt = stmt.where(CashMovement.occurred_at < end)
    row = (await session.execute(stmt)).one()
    t_in, t_out = int(row.total_in or 0), int(row.total_out or 0)
    return {"totalIn": t_in, "totalOut": t_out, "balance": t_in - t_out}


async def insert_movement(session, movement: CashMovement) -> CashMovement:
    session.add(movement)
    await session.flush()
    return movement
