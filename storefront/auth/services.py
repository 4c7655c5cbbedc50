from storefront.auth.constants import logger
from storefront.auth.identity import IdentityVerifier
from storefront.auth.repository import latest_order_by_federated_uid, latest_order_by_phone
from storefront.auth.session import SessionCodec
from storefront.auth.utils import is_valid_pin, normalize_phone, validate_phone, verify_pin
from storefront.common.custom_exceptions import MalformedToken, OrderNotFound, StorefrontError, Unauthenticated


class MissingCredentials(StorefrontError):
    code = "MISSING_CREDENTIALS"
    default_message = "Phone and PIN are required"


class InvalidPinFormat(StorefrontError):
    code = "INVALID_PIN"
    default_message = "PIN must have 4 digits"


class InvalidPhone(StorefrontError):
    code = "INVALID_PHONE"
    default_message = "Invalid phone number"


class PinNotConfigured(StorefrontError):
    code = "PIN_NOT_SET"
    default_message = "Order has no PIN configured"


async def login_with_pin(session, codec: SessionCodec, phone: str, pin: str):
    """Phone + PIN against the customer's most recent order. Returns (order, token)."""
    digits = normalize_phone(phone)
    pin = (pin or "").strip()
    if not digits or not pin:
        raise MissingCredentials()
    if not is_valid_pin(pin):
        raise InvalidPinFormat()
    if validate_phone(digits) is None:
        raise InvalidPhone()

    order = await latest_order_by_phone(session, digits)
    if not order:
        logger.info("auth.customer_login.no_order", extra={"phone": digits})
        raise OrderNotFound("No order found for this phone")
    if not order.pin_hash:
        raise PinNotConfigured()
    if not verify_pin(pin, order.pin_hash):
        logger.warning("auth.customer_login.wrong_pin", extra={"order_id": order.id})
        raise Unauthenticated("Wrong PIN")

    token = codec.sign(order.id, order.customer_phone_norm,
                       include_phone_hash=bool(order.customer_phone_hash))
    logger.info("auth.customer_login.success", extra={"order_id": order.id})
    return order, token


async def login_federated(session, codec: SessionCodec, verifier: IdentityVerifier, id_token: str):
    # header.payload.signature
    segments = (id_token or "").strip().split(".")
    if len(segments) != 3 or not all(segments):
        raise MalformedToken("Malformed identity token")

    identity = verifier.verify(id_token)
    if identity is None:
        raise Unauthenticated("Invalid identity token")

    order = await latest_order_by_federated_uid(session, identity.subject_id)
    if not order:
        logger.info("auth.federated_login.no_order", extra={"subject_id": identity.subject_id})
        raise OrderNotFound("No order linked to this account")
    if not order.customer_phone_norm:
        raise InvalidPhone("Order has no phone on record")

    token = codec.sign(order.id, order.customer_phone_norm,
                       include_phone_hash=bool(order.customer_phone_hash))
    logger.info("auth.federated_login.success", extra={"order_id": order.id})
    return order, token
