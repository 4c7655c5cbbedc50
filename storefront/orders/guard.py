import enum
from dataclasses import dataclass
from typing import Optional
from storefront.auth.models import Caller, CustomerSession, Privileged
from storefront.auth.utils import normalize_phone, phone_hash_matches
from storefront.common.custom_exceptions import Forbidden, StorefrontError, Unauthenticated
from storefront.schema.full_schema import Orders


class DenyReason(str, enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    reason: Optional[DenyReason] = None

    def as_error(self) -> StorefrontError:
        if self.reason == DenyReason.UNAUTHENTICATED:
            return Unauthenticated()
        return Forbidden()


ALLOW = AccessDecision(allowed=True)


def deny(reason: DenyReason) -> AccessDecision:
    return AccessDecision(allowed=False, reason=reason)


def customer_phone_matches(session: CustomerSession, order: Orders) -> bool:
    session_phone = normalize_phone(session.phone)
    if not session_phone:
        return False
    if order.customer_phone_hash:
        return phone_hash_matches(session_phone, order.customer_phone_hash)
    order_phone = normalize_phone(order.customer_phone_norm or order.customer_phone)
    return bool(order_phone) and order_phone == session_phone


def authorize(caller: Caller, order: Orders) -> AccessDecision:
    """Admins may act on any order; a customer session only on the one order it was minted for."""
    if isinstance(caller, Privileged):
        return ALLOW
    if isinstance(caller, CustomerSession):
        if caller.order_id != order.id:
            return deny(DenyReason.FORBIDDEN)
        if not customer_phone_matches(caller, order):
            return deny(DenyReason.FORBIDDEN)
        return ALLOW
    return deny(DenyReason.UNAUTHENTICATED)
