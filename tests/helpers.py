import base64
import time
from datetime import timedelta
from typing import Dict, List, Optional
from jose import jwt
from storefront.auth.utils import hash_phone, hash_pin, normalize_phone
from storefront.common.utils import now
from storefront.db.connection import async_session
from storefront.image_uploads.storage import StoredBlob
from storefront.schema.full_schema import OrderItem, Orders, OrderStatus, Product

url_prefix = "/api"

IDENTITY_KEY = "identity-test-key-0123456789abcdef0123"
SESSION_SECRET = "test-session-secret-0123456789abcdef-0123"

# 1x1 transparent png
PNG_1PX = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


def data_url(raw: bytes, content_type: str = "image/png") -> str:
    return f"data:{content_type};base64," + base64.b64encode(raw).decode("ascii")


def make_id_token(sub: str, *, admin: bool = False, email: Optional[str] = None,
                  expires_in: int = 600, key: str = IDENTITY_KEY, extra: Optional[dict] = None) -> str:
    payload = {"sub": sub, "iat": int(time.time()), "exp": int(time.time()) + expires_in}
    if admin:
        payload["admin"] = True
    if email:
        payload["email"] = email
    payload.update(extra or {})
    return jwt.encode(payload, key, algorithm="HS256")


def admin_headers(sub: str = "admin-1") -> Dict[str, str]:
    return {"Authorization": f"Bearer {make_id_token(sub, admin=True)}"}


class InMemoryBlobStorage:
    def __init__(self):
        self.blobs: Dict[str, bytes] = {}

    async def put(self, path: str, data: bytes, content_type: str) -> StoredBlob:
        self.blobs[path] = data
        return StoredBlob(url=f"https://blobs.test/{path}", path=path)


async def add_product(name: str = "Coxinha", sale_price: int = 2500, unit_cost: int = 1000,
                      active: bool = True) -> Product:
    async with async_session() as session:
        product = Product(name=name, sale_price=sale_price, unit_cost=unit_cost, photos=[], active=active)
        session.add(product)
        await session.commit()
        return product


async def add_order(*, phone: str = "090-1234-5678", pin: str = "1234", name: str = "Aiko",
                    revenue: int = 5000, cost: int = 2000, status: OrderStatus = OrderStatus.PENDING,
                    with_phone_hash: bool = True, federated_uid: Optional[str] = None,
                    age: timedelta = timedelta(0), items: Optional[List[dict]] = None) -> Orders:
    digits = normalize_phone(phone)
    created = now() - age
    items = items if items is not None else [{"name": "Coxinha", "qty": 2, "custom": "no onion"}]
    async with async_session() as session:
        order = Orders(status=status, customer_name=name, customer_phone=phone, customer_phone_norm=digits,
                       customer_phone_hash=hash_phone(digits) if with_phone_hash else None,
                       federated_uid=federated_uid, pin_hash=hash_pin(pin),
                       revenue=revenue, cost=cost, profit=revenue - cost,
                       created_at=created, updated_at=created)
        session.add(order)
        await session.flush()
        for it in items:
            session.add(OrderItem(order_id=order.id, product_id="p-" + it["name"].lower(),
                                  name_snapshot=it["name"], qty=it["qty"], unit_price_snapshot=2500,
                                  unit_cost_snapshot=1000, custom_text=it.get("custom", "")))
        await session.commit()
        return order
