import hashlib
import hmac
import re
import unicodedata
from typing import Optional
from passlib.context import CryptContext
from storefront.auth.constants import ORDER_ID_MAX_LENGTH, PHONE_MAX_DIGITS, PHONE_MIN_DIGITS
from storefront.config.settings import config_settings

pin_context = CryptContext(schemes=[config_settings.PIN_HASH_SCHEME], deprecated="auto")

_PIN_RE = re.compile(r"^[0-9]{4}$")
_NON_DIGITS = re.compile(r"[^0-9]")


def hash_pin(pin: str) -> str:
    return pin_context.hash(pin)

def verify_pin(pin: str, pin_hash: str) -> bool:
    try:
        return pin_context.verify(pin, pin_hash)
    except (ValueError, TypeError):
        # unknown / corrupted hash format
        return False

def is_valid_pin(pin: str) -> bool:
    return bool(_PIN_RE.fullmatch(pin or ""))


def normalize_phone(phone) -> str:
    # full-width digits from IME input fold to ASCII; other scripts are dropped
    return _NON_DIGITS.sub("", unicodedata.normalize("NFKC", str(phone or "")))

def hash_phone(phone: str) -> str:
    return hashlib.sha256(normalize_phone(phone).encode("utf-8")).hexdigest()

def phone_hash_matches(phone: str, expected_hash: str) -> bool:
    return hmac.compare_digest(hash_phone(phone).encode(), expected_hash.strip().lower().encode())


def validate_order_id(order_id) -> Optional[str]:
    if not isinstance(order_id, str):
        return None
    oid = order_id.strip()
    if not oid or len(oid) > ORDER_ID_MAX_LENGTH:
        return None
    if "/" in oid or "\\" in oid:
        return None
    return oid

def validate_phone(phone) -> Optional[str]:
    if not isinstance(phone, (str, int)) or isinstance(phone, bool):
        return None
    digits = normalize_phone(phone)
    if not (PHONE_MIN_DIGITS <= len(digits) <= PHONE_MAX_DIGITS):
        return None
    return digits
