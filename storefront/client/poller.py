"""Client side of the order chat: an HTTP adapter, a presenter holding view state,
and a poller that refreshes the presenter every couple of seconds while the
session lasts."""
import asyncio
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional
import httpx
from storefront.client.constants import MESSAGES_PATH, POLL_INTERVAL_SECONDS, REQUEST_TIMEOUT_SECONDS, logger
from storefront.client.image_prep import PhotoTooLarge, PhotoUnreadable, prepare_chat_photo


class ChatApiError(Exception):
    def __init__(self, status_code: int, code: Optional[str] = None, message: Optional[str] = None):
        self.status_code = status_code
        self.code = code
        self.message = message or f"Request failed ({status_code})"
        super().__init__(self.message)


class SessionEnded(ChatApiError):
    pass


def _raise_for_error(resp: httpx.Response) -> Dict[str, Any]:
    try:
        body = resp.json()
    except ValueError:
        body = {}
    if resp.is_success and isinstance(body, dict) and body.get("ok", True):
        return body
    err = body.get("error") if isinstance(body, dict) else None
    code = err.get("code") if isinstance(err, dict) else None
    message = err.get("message") if isinstance(err, dict) else None
    if resp.status_code == 401:
        raise SessionEnded(resp.status_code, code, message)
    raise ChatApiError(resp.status_code, code, message)


class ChatApi:
    """Thin wrapper over the customer endpoints. The session cookie lives in the client's jar.

    With `admin_token` set, requests carry a bearer and target `order_id` explicitly.
    """

    def __init__(self, client: httpx.AsyncClient, *, admin_token: Optional[str] = None,
                 order_id: Optional[str] = None):
        self.client = client
        self.admin_token = admin_token
        self.order_id = order_id

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.admin_token}"} if self.admin_token else {}

    async def login(self, phone: str, pin: str) -> str:
        resp = await self.client.post("/api/customer/login", json={"phone": phone, "pin": pin},
                                      timeout=REQUEST_TIMEOUT_SECONDS)
        return _raise_for_error(resp)["orderId"]

    async def login_federated(self, id_token: str) -> str:
        resp = await self.client.post("/api/customer/login-federated", json={"idToken": id_token},
                                      timeout=REQUEST_TIMEOUT_SECONDS)
        return _raise_for_error(resp)["orderId"]

    async def logout(self) -> None:
        resp = await self.client.post("/api/customer/logout", timeout=REQUEST_TIMEOUT_SECONDS)
        _raise_for_error(resp)

    async def fetch_messages(self) -> Dict[str, Any]:
        params = {"orderId": self.order_id} if self.admin_token and self.order_id else None
        resp = await self.client.get(MESSAGES_PATH, params=params, headers=self._headers(),
                                     timeout=REQUEST_TIMEOUT_SECONDS)
        return _raise_for_error(resp)

    async def send_message(self, text: str, image_data_url: Optional[str] = None) -> None:
        payload: Dict[str, Any] = {"text": text, "imageDataUrl": image_data_url}
        if self.admin_token and self.order_id:
            payload["orderId"] = self.order_id
        resp = await self.client.post(MESSAGES_PATH, json=payload, headers=self._headers(),
                                      timeout=REQUEST_TIMEOUT_SECONDS)
        _raise_for_error(resp)


@dataclass
class ChatView:
    order: Optional[Dict[str, Any]] = None
    messages: List[Dict[str, Any]] = field(default_factory=list)
    draft_text: str = ""
    draft_image: Optional[str] = None
    error: Optional[str] = None
    busy: bool = False
    session_active: bool = True


class ChatPresenter:

    def __init__(self, api: ChatApi, on_render: Optional[Callable[[ChatView], None]] = None):
        self.api = api
        self.view = ChatView()
        self._on_render = on_render

    def _render(self) -> None:
        if self._on_render is not None:
            self._on_render(self.view)

    def set_draft(self, text: str) -> None:
        self.view.draft_text = text
        self._render()

    async def attach_photo(self, raw: Optional[bytes]) -> None:
        if not raw:
            self.view.draft_image = None
            self._render()
            return
        self.view.busy = True
        try:
            self.view.draft_image = await asyncio.to_thread(prepare_chat_photo, raw)
            self.view.error = None
        except (PhotoTooLarge, PhotoUnreadable) as e:
            self.view.draft_image = None
            self.view.error = str(e)
        finally:
            self.view.busy = False
            self._render()

    @property
    def can_send(self) -> bool:
        return bool(self.view.draft_text.strip() or self.view.draft_image) and not self.view.busy

    async def refresh(self) -> bool:
        """Pull the latest state. Returns False once the session is gone."""
        try:
            data = await self.api.fetch_messages()
        except SessionEnded:
            self.view.session_active = False
            self._render()
            return False
        except (ChatApiError, httpx.HTTPError) as e:
            logger.warning("client.chat.refresh_failed", extra={"reason": type(e).__name__})
            return True

        self.view.order = data.get("order")
        self.view.messages = list(data.get("messages") or [])
        self._render()
        return True

    async def send(self) -> bool:
        if not self.can_send:
            return False

        text = self.view.draft_text.strip()
        image = self.view.draft_image

        # cleared before the request resolves; not restored on failure
        self.view.draft_text = ""
        self.view.draft_image = None
        self.view.busy = True
        self._render()

        try:
            await self.api.send_message(text, image)
        except SessionEnded:
            self.view.session_active = False
            self.view.error = "Session expired"
            return False
        except ChatApiError as e:
            self.view.error = e.message
            return False
        except httpx.HTTPError as e:
            self.view.error = f"Failed to send: {type(e).__name__}"
            return False
        finally:
            self.view.busy = False
            self._render()

        self.view.error = None
        await self.refresh()
        return True


class ChatPoller:
    """Refreshes the presenter every `interval` seconds until stopped or the session ends."""

    def __init__(self, presenter: ChatPresenter, interval: float = POLL_INTERVAL_SECONDS):
        self.presenter = presenter
        self.interval = interval
        self._stop = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run(self) -> None:
        while not self._stop.is_set():
            if not await self.presenter.refresh():
                logger.info("client.chat.session_ended")
                break
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                continue

    def start(self) -> asyncio.Task:
        if not self.running:
            self._stop.clear()
            self._task = asyncio.create_task(self.run())
        return self._task

    async def stop(self) -> None:
        self._stop.set()
        if self._task is not None:
            await self._task
            self._task = None
