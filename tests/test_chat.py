from datetime import timedelta
import pytest
from sqlalchemy import func, select
from storefront.auth.constants import COOKIE_NAME
from storefront.auth.session import SessionCodec
from storefront.chat.dependencies import chat_limits
from storefront.chat.models import ChatLimits
from storefront.db.connection import async_session
from storefront.main import app
from storefront.schema.full_schema import ChatMessage, Orders
from tests.helpers import PNG_1PX, SESSION_SECRET, add_order, admin_headers, data_url, url_prefix

MESSAGES = f"{url_prefix}/customer/messages"


async def login(client, phone="090-1234-5678", pin="1234"):
    resp = await client.post(f"{url_prefix}/customer/login", json={"phone": phone, "pin": pin})
    assert resp.status_code == 200, resp.text
    return resp.json()["orderId"]


async def message_count(order_id):
    async with async_session() as session:
        stmt = select(func.count()).select_from(ChatMessage).where(ChatMessage.order_id == order_id)
        return (await session.execute(stmt)).scalar_one()


@pytest.fixture
def small_images():
    app.dependency_overrides[chat_limits] = lambda: ChatLimits(max_image_bytes=len(PNG_1PX), history_limit=300)
    yield len(PNG_1PX)
    app.dependency_overrides.pop(chat_limits, None)


async def test_customer_happy_path(ac_client):
    order = await add_order(name="Aiko", revenue=5000)
    await login(ac_client)

    resp = await ac_client.get(MESSAGES)
    assert resp.status_code == 200
    body = resp.json()
    assert body["ok"] is True
    assert body["order"]["id"] == order.id
    assert body["order"]["status"] == "pending"
    assert body["order"]["itemsSummary"] == "Coxinha x2 (no onion)"
    assert body["order"]["total"] == 5000
    assert body["order"]["customerName"] == "Aiko"
    assert body["messages"] == []

    sent = await ac_client.post(MESSAGES, json={"text": "  Hello, is it ready?  "})
    assert sent.status_code == 200
    assert sent.json()["ok"] is True

    messages = (await ac_client.get(MESSAGES)).json()["messages"]
    assert len(messages) == 1
    assert messages[0]["senderRole"] == "customer"
    assert messages[0]["text"] == "Hello, is it ready?"
    assert messages[0]["imageUrl"] is None


async def test_admin_and_customer_messages_interleave_in_order(ac_client, other_client):
    order = await add_order()
    await login(ac_client)

    await ac_client.post(MESSAGES, json={"text": "first"})
    admin_resp = await other_client.post(MESSAGES, json={"text": "second", "orderId": order.id},
                                         headers=admin_headers())
    assert admin_resp.status_code == 200
    await ac_client.post(MESSAGES, json={"text": "third"})

    customer_view = (await ac_client.get(MESSAGES)).json()["messages"]
    admin_view = (await other_client.get(MESSAGES, params={"orderId": order.id}, headers=admin_headers())).json()

    assert [m["text"] for m in customer_view] == ["first", "second", "third"]
    assert [m["senderRole"] for m in customer_view] == ["customer", "admin", "customer"]
    assert admin_view["messages"] == customer_view


async def test_send_touches_order_updated_at(ac_client):
    order = await add_order()
    await login(ac_client)
    await ac_client.post(MESSAGES, json={"text": "hi"})

    async with async_session() as session:
        refreshed = await session.get(Orders, order.id)
        assert refreshed.updated_at.replace(tzinfo=None) > order.updated_at.replace(tzinfo=None)


async def test_text_is_truncated(ac_client):
    await login_after_order(ac_client)
    await ac_client.post(MESSAGES, json={"text": "x" * 2500})
    messages = (await ac_client.get(MESSAGES)).json()["messages"]
    assert len(messages[0]["text"]) == 2000


async def login_after_order(client):
    order = await add_order()
    await login(client)
    return order


@pytest.mark.parametrize("payload", [{}, {"text": "   "}, {"text": "", "imageDataUrl": ""}, {"imageDataUrl": None}])
async def test_empty_message_appends_nothing(ac_client, payload):
    order = await login_after_order(ac_client)

    resp = await ac_client.post(MESSAGES, json=payload)
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "EMPTY_MESSAGE"
    assert await message_count(order.id) == 0


async def test_image_exactly_at_limit_is_uploaded(ac_client, blob_storage, small_images):
    order = await login_after_order(ac_client)

    resp = await ac_client.post(MESSAGES, json={"imageDataUrl": data_url(PNG_1PX)})
    assert resp.status_code == 200

    messages = (await ac_client.get(MESSAGES)).json()["messages"]
    assert len(messages) == 1
    assert messages[0]["text"] == ""
    path = f"orders/{order.id}/messages/{messages[0]['id']}"
    assert blob_storage.blobs == {path: PNG_1PX}
    assert messages[0]["imageUrl"] == f"https://blobs.test/{path}"


async def test_image_one_byte_over_limit_is_rejected(ac_client, blob_storage, small_images):
    order = await login_after_order(ac_client)

    resp = await ac_client.post(MESSAGES, json={"text": "photo", "imageDataUrl": data_url(PNG_1PX + b"\x00")})
    assert resp.status_code == 413
    assert resp.json()["error"]["code"] == "IMAGE_TOO_LARGE"
    assert blob_storage.blobs == {}
    assert await message_count(order.id) == 0


@pytest.mark.parametrize("image, code", [
    (data_url(b"<svg/>", "image/svg+xml"), "UNSUPPORTED_IMAGE_TYPE"),
    ("data:image/png;base64,@@@@", "INVALID_IMAGE"),
    ("https://example.com/cat.png", "INVALID_IMAGE"),
])
async def test_bad_images_are_rejected(ac_client, blob_storage, image, code):
    order = await login_after_order(ac_client)
    resp = await ac_client.post(MESSAGES, json={"imageDataUrl": image})
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == code
    assert await message_count(order.id) == 0


async def test_anonymous_caller_is_rejected(ac_client):
    await add_order()
    assert (await ac_client.get(MESSAGES)).status_code == 401
    assert (await ac_client.post(MESSAGES, json={"text": "hi"})).status_code == 401


async def test_tampered_cookie_is_anonymous(ac_client):
    await login_after_order(ac_client)
    token = ac_client.cookies.get(COOKIE_NAME)
    ac_client.cookies.clear()
    tampered = token[:-1] + ("0" if token[-1] != "0" else "1")

    resp = await ac_client.get(MESSAGES, headers={"Cookie": f"{COOKIE_NAME}={tampered}"})
    assert resp.status_code == 401


async def test_session_only_reaches_its_own_order(ac_client, other_client):
    older = await add_order(phone="090-1234-5678", age=timedelta(days=1))
    newer = await add_order(phone="090-1234-5678")
    await other_client.post(MESSAGES, json={"text": "for the older order", "orderId": older.id},
                            headers=admin_headers())

    assert await login(ac_client) == newer.id
    body = (await ac_client.get(MESSAGES)).json()
    assert body["order"]["id"] == newer.id
    assert body["messages"] == []

    # the orderId field is ignored for customers
    await ac_client.post(MESSAGES, json={"text": "hello", "orderId": older.id})
    assert await message_count(newer.id) == 1
    assert await message_count(older.id) == 1


async def test_session_with_foreign_phone_is_forbidden(ac_client):
    order = await add_order(phone="090-1234-5678")
    forged = SessionCodec(SESSION_SECRET).sign(order.id, "08011112222")
    cookie = {"Cookie": f"{COOKIE_NAME}={forged}"}

    resp = await ac_client.get(MESSAGES, headers=cookie)
    assert resp.status_code == 403
    assert resp.json()["error"]["code"] == "FORBIDDEN"
    assert (await ac_client.post(MESSAGES, json={"text": "hi"}, headers=cookie)).status_code == 403
    assert await message_count(order.id) == 0


async def test_admin_must_name_the_order(ac_client):
    await add_order()
    resp = await ac_client.get(MESSAGES, headers=admin_headers())
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "MISSING_ORDER_ID"

    resp = await ac_client.post(MESSAGES, json={"text": "hi"}, headers=admin_headers())
    assert resp.status_code == 400


async def test_admin_unknown_order(ac_client):
    resp = await ac_client.get(MESSAGES, params={"orderId": "nope"}, headers=admin_headers())
    assert resp.status_code == 404


async def test_history_window_returns_latest_oldest_first(ac_client, other_client):
    order = await login_after_order(ac_client)
    app.dependency_overrides[chat_limits] = lambda: ChatLimits(max_image_bytes=1024, history_limit=3)
    try:
        for i in range(5):
            await ac_client.post(MESSAGES, json={"text": f"m{i}"})
        messages = (await ac_client.get(MESSAGES)).json()["messages"]
    finally:
        app.dependency_overrides.pop(chat_limits, None)

    assert [m["text"] for m in messages] == ["m2", "m3", "m4"]
    assert await message_count(order.id) == 5
