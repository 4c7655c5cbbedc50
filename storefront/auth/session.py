"""Signed, self-contained customer session tokens.

A token is ``base64url(payload) + "." + hex(hmac_sha256(secret, payload))`` where the
payload is compact JSON ``{"v", "orderId", "phone", ["phoneHash"], "iat", "exp"}``
with millisecond timestamps. The server keeps no session table: a token is valid
until it expires and cannot be revoked earlier.
"""
import base64
import binascii
import hashlib
import hmac
import json
import math
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from functools import lru_cache
from typing import Callable, Optional
from storefront.auth.constants import (CLOCK_SKEW_TOLERANCE, DEFAULT_SESSION_TTL, MAX_SESSION_LIFETIME,
                                       MIN_SECRET_LENGTH, MIN_SESSION_TTL, SESSION_VERSION, logger)
from storefront.auth.utils import hash_phone, validate_order_id, validate_phone
from storefront.common.custom_exceptions import InvalidClaim, WeakConfiguration
from storefront.common.utils import now
from storefront.config.settings import config_settings

_SIGNATURE_RE = re.compile(r"^[0-9a-f]{64}$")
_PHONE_HASH_RE = re.compile(r"^[0-9a-f]{64}$", re.IGNORECASE)


@dataclass(frozen=True)
class SessionClaims:
    order_id: str
    phone: str
    phone_hash: Optional[str] = None
    issued_at_ms: int = 0
    expires_at_ms: int = 0


def _to_ms(value: datetime) -> int:
    return int(value.timestamp() * 1000)

def _ms(delta: timedelta) -> int:
    return int(delta.total_seconds() * 1000)


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")

def _b64url_decode(segment: str) -> Optional[bytes]:
    padded = segment + "=" * (-len(segment) % 4)
    try:
        raw = base64.b64decode(padded, altchars=b"-_", validate=True)
    except (binascii.Error, ValueError):
        return None
    # reject non-canonical encodings (stray bits in the last character)
    if _b64url_encode(raw) != segment:
        return None
    return raw


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


class SessionCodec:

    def __init__(self, secret: Optional[str], clock: Callable[[], datetime] = now):
        if not secret:
            raise WeakConfiguration("SESSION_SECRET is not set")
        if len(secret) < MIN_SECRET_LENGTH:
            raise WeakConfiguration(f"SESSION_SECRET is too short (use >= {MIN_SECRET_LENGTH} chars)")
        self._key = secret.encode("utf-8")
        self._clock = clock

    def _signature(self, data: bytes) -> str:
        return hmac.new(self._key, data, hashlib.sha256).hexdigest()

    def sign(self, order_id: str, phone: str, ttl: Optional[timedelta] = None,
             include_phone_hash: bool = False) -> str:
        oid = validate_order_id(order_id)
        if oid is None:
            raise InvalidClaim("Invalid orderId")
        digits = validate_phone(phone)
        if digits is None:
            raise InvalidClaim("Invalid phone")

        ttl = max(MIN_SESSION_TTL, ttl or DEFAULT_SESSION_TTL)
        issued_at = _to_ms(self._clock())

        payload = {"v": SESSION_VERSION, "orderId": oid, "phone": digits}
        if include_phone_hash:
            payload["phoneHash"] = hash_phone(digits)
        payload["iat"] = issued_at
        payload["exp"] = issued_at + _ms(ttl)

        data = json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
        return _b64url_encode(data) + "." + self._signature(data)

    def verify(self, token: Optional[str]) -> Optional[SessionClaims]:
        if not token or not isinstance(token, str):
            return None

        parts = token.split(".")
        if len(parts) != 2:
            return None
        encoded, signature = parts
        if not encoded or not _SIGNATURE_RE.match(signature):
            return None

        data = _b64url_decode(encoded)
        if data is None:
            return None

        expected = self._signature(data)
        if not hmac.compare_digest(expected.encode("ascii"), signature.encode("ascii")):
            return None

        try:
            payload = json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            return None
        if not isinstance(payload, dict) or payload.get("v") != SESSION_VERSION:
            return None

        order_id = validate_order_id(payload.get("orderId"))
        phone = validate_phone(payload.get("phone"))
        if order_id is None or phone is None or not isinstance(payload.get("phone"), str):
            return None

        iat, exp = payload.get("iat"), payload.get("exp")
        if not _is_number(iat) or not _is_number(exp):
            return None

        current = _to_ms(self._clock())
        if exp <= current:
            return None
        if iat > current + _ms(CLOCK_SKEW_TOLERANCE):
            return None
        if exp - iat > _ms(MAX_SESSION_LIFETIME):
            return None

        phone_hash = payload.get("phoneHash")
        if not (isinstance(phone_hash, str) and _PHONE_HASH_RE.match(phone_hash)):
            phone_hash = None

        return SessionClaims(order_id=order_id, phone=phone, phone_hash=phone_hash,
                             issued_at_ms=int(iat), expires_at_ms=int(exp))


@lru_cache(maxsize=1)
def get_session_codec() -> SessionCodec:
    codec = SessionCodec(config_settings.SESSION_SECRET)
    logger.debug("auth.session_codec.ready")
    return codec
