from typing import Any, Dict, Optional
from storefront.auth.models import Anonymous, Caller, CustomerSession, Privileged
from storefront.chat.constants import MAX_TEXT_LENGTH, logger
from storefront.chat.models import ChatLimits
from storefront.chat.repository import insert_message, latest_messages
from storefront.common.custom_exceptions import EmptyMessage, OrderNotFound, StorefrontError, Unauthenticated
from storefront.common.utils import isoformat_or_none, now
from storefront.image_uploads.storage import BlobStorage, chat_image_path
from storefront.image_uploads.utils import parse_image_data_url
from storefront.orders.guard import authorize
from storefront.orders.repository import get_order
from storefront.orders.services import order_summary
from storefront.schema.full_schema import ChatMessage, Orders, SenderRole, new_public_id


class MissingOrderId(StorefrontError):
    code = "MISSING_ORDER_ID"
    default_message = "Missing orderId"


def target_order_id(caller: Caller, requested: Optional[str]) -> str:
    """Customers always talk about the order in their session; admins name it explicitly."""
    if isinstance(caller, Anonymous):
        raise Unauthenticated()
    if isinstance(caller, CustomerSession):
        return caller.order_id
    order_id = str(requested or "").strip()
    if not order_id:
        raise MissingOrderId()
    return order_id


async def load_authorized_order(session, caller: Caller, order_id: str) -> Orders:
    order = await get_order(session, order_id)
    if order is None:
        raise OrderNotFound()
    decision = authorize(caller, order)
    if not decision.allowed:
        logger.warning("chat.access.denied", extra={"order_id": order_id, "reason": decision.reason.value})
        raise decision.as_error()
    return order


def serialize_message(msg: ChatMessage) -> Dict[str, Any]:
    return {
        "id": msg.public_id,
        "senderRole": msg.sender_role.value,
        "text": msg.text or "",
        "imageUrl": msg.image_url,
        "createdAt": isoformat_or_none(msg.created_at),
    }


async def list_messages(session, caller: Caller, order_id: str, limits: ChatLimits) -> Dict[str, Any]:
    order = await load_authorized_order(session, caller, order_id)
    messages = await latest_messages(session, order.id, limits.history_limit)
    logger.debug("chat.messages.listed", extra={"order_id": order.id, "count": len(messages)})
    return {"order": order_summary(order), "messages": [serialize_message(m) for m in messages]}


async def send_message(session, caller: Caller, order_id: str, text: Optional[str],
                       image_data_url: Optional[str], storage: BlobStorage, limits: ChatLimits) -> ChatMessage:
    body = str(text or "").strip()[:MAX_TEXT_LENGTH]
    image = str(image_data_url or "").strip()
    if not body and not image:
        raise EmptyMessage()

    order = await load_authorized_order(session, caller, order_id)

    # validate before touching storage
    decoded = parse_image_data_url(image, limits.max_image_bytes) if image else None

    message_id = new_public_id()
    image_url, image_path = None, None
    if decoded is not None:
        stored = await storage.put(chat_image_path(order.id, message_id), decoded.data, decoded.content_type)
        image_url, image_path = stored.url, stored.path

    is_admin = isinstance(caller, Privileged)
    ts = now()
    message = ChatMessage(
        public_id=message_id,
        order_id=order.id,
        sender_role=SenderRole.ADMIN if is_admin else SenderRole.CUSTOMER,
        sender_id=caller.subject_id if is_admin else None,
        text=body,
        image_url=image_url,
        image_path=image_path,
        created_at=ts,
    )
    await insert_message(session, message)
    order.updated_at = ts

    logger.info("chat.message.sent", extra={"order_id": order.id, "sender_role": message.sender_role.value,
                                            "has_image": decoded is not None})
    return message
