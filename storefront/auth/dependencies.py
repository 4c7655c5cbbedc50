from typing import Optional
from fastapi import Request
from fastapi.security import HTTPBearer
from storefront.auth.constants import COOKIE_NAME, logger
from storefront.auth.identity import IdentityVerifier, get_identity_verifier
from storefront.auth.models import Anonymous, Caller, CustomerSession, Privileged
from storefront.auth.session import SessionCodec, get_session_codec
from storefront.common.custom_exceptions import Unauthenticated


def session_codec(request: Request) -> SessionCodec:
    return getattr(request.app.state, "session_codec", None) or get_session_codec()

def identity_verifier() -> IdentityVerifier:
    return get_identity_verifier()


class CallerResolution(HTTPBearer):
    """Admin bearer first, then the customer session cookie.

    An invalid or non-privileged bearer does not fail the request; the cookie is tried next.
    """

    def __init__(self):
        super().__init__(auto_error=False)

    async def __call__(self, request: Request) -> Caller:
        creds = await super().__call__(request)

        if creds and creds.credentials:
            admin = identity_verifier().verify_privileged(creds.credentials)
            if admin:
                return Privileged(subject_id=admin.subject_id)
            logger.warning("auth.caller.bearer_rejected", extra={"path": request.url.path})

        token: Optional[str] = request.cookies.get(COOKIE_NAME)
        claims = session_codec(request).verify(token)
        if claims:
            return CustomerSession(order_id=claims.order_id, phone=claims.phone, phone_hash=claims.phone_hash)

        if token:
            logger.info("auth.caller.session_rejected", extra={"path": request.url.path})
        return Anonymous()


resolve_caller = CallerResolution()


class AdminAuthentication(HTTPBearer):
    """Admin-only endpoints: a bearer token carrying the privileged claim is required."""

    def __init__(self):
        super().__init__(auto_error=False)

    async def __call__(self, request: Request) -> Privileged:
        creds = await super().__call__(request)
        if not creds or not creds.credentials:
            logger.warning("auth.admin.missing_token", extra={"path": request.url.path})
            raise Unauthenticated("Missing Authorization Bearer token")

        admin = identity_verifier().verify_privileged(creds.credentials)
        if not admin:
            logger.warning("auth.admin.rejected", extra={"path": request.url.path})
            raise Unauthenticated("Invalid token or not admin")

        request.state.admin_subject_id = admin.subject_id
        return Privileged(subject_id=admin.subject_id)


require_admin = AdminAuthentication()
