from typing import List
from sqlalchemy import select
from storefront.schema.full_schema import ChatMessage


async def latest_messages(session, order_id: str, limit: int) -> List[ChatMessage]:
    """Most recent `limit` messages, returned oldest first."""
    stmt = (select(ChatMessage)
            .where(ChatMessage.order_id == order_id)
            .order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc())
            .limit(limit))
    res = await session.execute(stmt)
    rows = list(res.scalars().all())
    rows.reverse()
    return rows


async def insert_message(session, message: ChatMessage) -> ChatMessage:
    session.add(message)
    await session.flush()
    return message
