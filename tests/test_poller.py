import asyncio
import json
import httpx
import pytest
from storefront.client.poller import ChatApi, ChatPoller, ChatPresenter, SessionEnded


class FakeChatServer:
    def __init__(self):
        self.messages = []
        self.requests = []
        self.expired = False
        self.fail_sends = False

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.expired:
            return httpx.Response(401, json={"ok": False, "error": {"code": "UNAUTHENTICATED", "message": "Not authenticated"}})
        if request.method == "GET":
            return httpx.Response(200, json={"ok": True, "order": {"id": "order-1", "status": "pending"},
                                             "messages": list(self.messages)})
        if self.fail_sends:
            return httpx.Response(413, json={"ok": False, "error": {"code": "IMAGE_TOO_LARGE", "message": "Image too large"}})
        body = json.loads(request.content)
        self.messages.append({"id": str(len(self.messages)), "senderRole": "customer", "text": body["text"],
                              "imageUrl": None})
        return httpx.Response(200, json={"ok": True})


@pytest.fixture
async def server():
    return FakeChatServer()


@pytest.fixture
async def http(server):
    async with httpx.AsyncClient(transport=httpx.MockTransport(server.handler), base_url="http://shop.test") as client:
        yield client


async def test_refresh_renders_server_state(server, http):
    rendered = []
    server.messages.append({"id": "0", "senderRole": "admin", "text": "Thanks for your order", "imageUrl": None})
    presenter = ChatPresenter(ChatApi(http), on_render=lambda view: rendered.append(list(view.messages)))

    assert await presenter.refresh() is True
    assert presenter.view.order["id"] == "order-1"
    assert rendered[-1][0]["text"] == "Thanks for your order"


async def test_send_clears_draft_before_response_and_refreshes(server, http):
    snapshots = []
    presenter = ChatPresenter(ChatApi(http), on_render=lambda view: snapshots.append((view.draft_text, view.busy)))
    presenter.set_draft("  hello  ")

    assert await presenter.send() is True
    # first render after set_draft is the optimistic clear
    assert snapshots[1] == ("", True)
    assert [m["text"] for m in presenter.view.messages] == ["hello"]
    assert presenter.view.error is None


async def test_failed_send_surfaces_error_and_does_not_restore_draft(server, http):
    server.fail_sends = True
    presenter = ChatPresenter(ChatApi(http))
    presenter.set_draft("lost words")

    assert await presenter.send() is False
    assert presenter.view.draft_text == ""
    assert presenter.view.error == "Image too large"


async def test_nothing_to_send(http):
    presenter = ChatPresenter(ChatApi(http))
    presenter.set_draft("   ")
    assert presenter.can_send is False
    assert await presenter.send() is False


async def test_admin_mode_targets_order_with_bearer(server, http):
    api = ChatApi(http, admin_token="tok", order_id="order-9")
    await api.fetch_messages()
    await api.send_message("hi")

    get_req, post_req = server.requests
    assert get_req.url.params["orderId"] == "order-9"
    assert get_req.headers["Authorization"] == "Bearer tok"
    assert json.loads(post_req.content)["orderId"] == "order-9"


async def test_customer_mode_never_sends_order_id(server, http):
    api = ChatApi(http, order_id="order-9")
    await api.fetch_messages()
    await api.send_message("hi")
    assert "orderId" not in server.requests[0].url.params
    assert "orderId" not in json.loads(server.requests[1].content)
    assert "Authorization" not in server.requests[0].headers


async def test_expired_session_raises(server, http):
    server.expired = True
    with pytest.raises(SessionEnded):
        await ChatApi(http).fetch_messages()


async def test_poller_polls_until_stopped(server, http):
    poller = ChatPoller(ChatPresenter(ChatApi(http)), interval=0.01)
    poller.start()
    await asyncio.sleep(0.1)
    await poller.stop()

    polls = len(server.requests)
    assert polls >= 3
    await asyncio.sleep(0.05)
    assert len(server.requests) == polls
    assert not poller.running


async def test_poller_stops_when_session_ends(server, http):
    presenter = ChatPresenter(ChatApi(http))
    poller = ChatPoller(presenter, interval=0.01)
    task = poller.start()
    await asyncio.sleep(0.03)
    server.expired = True

    await asyncio.wait_for(task, timeout=1)
    assert presenter.view.session_active is False
