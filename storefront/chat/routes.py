from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from storefront.auth.dependencies import resolve_caller
from storefront.auth.models import Caller
from storefront.chat.dependencies import chat_limits
from storefront.chat.models import ChatLimits, SendMessageIn
from storefront.chat.services import list_messages, send_message, target_order_id
from storefront.common.utils import success_response
from storefront.db.dependencies import get_session
from storefront.image_uploads.dependency import get_blob_storage
from storefront.image_uploads.storage import BlobStorage

chat_router = APIRouter()


@chat_router.get("/messages")
async def get_messages(order_id: Optional[str] = Query(default=None, alias="orderId"),
                       caller: Caller = Depends(resolve_caller),
                       limits: ChatLimits = Depends(chat_limits),
                       session: AsyncSession = Depends(get_session)):
    target = target_order_id(caller, order_id)
    data = await list_messages(session, caller, target, limits)
    return success_response(data)


@chat_router.post("/messages")
async def post_message(payload: SendMessageIn,
                       caller: Caller = Depends(resolve_caller),
                       limits: ChatLimits = Depends(chat_limits),
                       storage: BlobStorage = Depends(get_blob_storage),
                       session: AsyncSession = Depends(get_session)):
    target = target_order_id(caller, payload.orderId)
    await send_message(session, caller, target, payload.text, payload.imageDataUrl, storage, limits)
    await session.commit()
    return success_response()
