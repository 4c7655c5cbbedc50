from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.responses import Response
from storefront.auth.constants import COOKIE_MAX_AGE_SECONDS, COOKIE_NAME, secure_cookie, logger
from storefront.auth.dependencies import identity_verifier, session_codec
from storefront.auth.models import CustomerLoginIn, FederatedLoginIn
from storefront.auth.services import login_federated, login_with_pin
from storefront.auth.session import SessionCodec
from storefront.common.utils import success_response
from storefront.db.dependencies import get_session

auth_router = APIRouter()


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(COOKIE_NAME, token, httponly=True, secure=secure_cookie, path="/",
                        max_age=COOKIE_MAX_AGE_SECONDS, samesite="lax")


@auth_router.post("/login")
async def customer_login(payload: CustomerLoginIn,
                         session: AsyncSession = Depends(get_session),
                         codec: SessionCodec = Depends(session_codec)):
    order, token = await login_with_pin(session, codec, payload.phone, payload.pin)
    response = success_response({"orderId": order.id})
    set_session_cookie(response, token)
    return response


@auth_router.post("/login-federated")
async def customer_login_federated(payload: FederatedLoginIn,
                                   session: AsyncSession = Depends(get_session),
                                   codec: SessionCodec = Depends(session_codec)):
    order, token = await login_federated(session, codec, identity_verifier(), payload.idToken)
    response = success_response({"orderId": order.id})
    set_session_cookie(response, token)
    return response


@auth_router.post("/logout")
async def customer_logout():
    response = success_response()
    response.delete_cookie(key=COOKIE_NAME, path="/")
    logger.info("auth.customer_logout")
    return response
