from fastapi import FastAPI, HTTPException, Request,status
from fastapi.exceptions import RequestValidationError
from storefront.common import logger
from storefront.common.utils import build_error, json_error 
from storefront.common.constants import request_id_ctx


class StorefrontError(Exception):
    """Base for domain errors that map onto an HTTP status and an error code."""
    status_code = status.HTTP_400_BAD_REQUEST
    code = "BAD_REQUEST"
    default_message = "Bad request"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(StorefrontError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHENTICATED"
    default_message = "Not authenticated"


class Forbidden(StorefrontError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"
    default_message = "Forbidden"


class InvalidClaim(StorefrontError):
    code = "INVALID_CLAIM"
    default_message = "Invalid session claim"


class MalformedToken(StorefrontError):
    code = "MALFORMED_TOKEN"
    default_message = "Malformed token"


class NotFound(StorefrontError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    default_message = "Not found"


class OrderNotFound(NotFound):
    code = "ORDER_NOT_FOUND"
    default_message = "Order not found"


class ProductNotFound(NotFound):
    code = "PRODUCT_NOT_FOUND"
    default_message = "Product not found"


class EmptyMessage(StorefrontError):
    code = "EMPTY_MESSAGE"
    default_message = "Missing text or image"


class ImageTooLarge(StorefrontError):
    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    code = "IMAGE_TOO_LARGE"
    default_message = "Image too large, compress it before sending"


class UnsupportedImageType(StorefrontError):
    code = "UNSUPPORTED_IMAGE_TYPE"
    default_message = "Image type not allowed"


class InvalidImageData(StorefrontError):
    code = "INVALID_IMAGE"
    default_message = "Invalid image format"


class InvalidTotals(StorefrontError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "INVALID_TOTALS"
    default_message = "Invalid order totals"


class InvalidTransition(StorefrontError):
    status_code = status.HTTP_409_CONFLICT
    code = "INVALID_TRANSITION"
    default_message = "Order status does not allow this transition"


class WeakConfiguration(RuntimeError):
    """Fatal startup condition, never surfaced as a per-request error."""


async def storefront_error_handler(request: Request, exc: StorefrontError):
    rid = request_id_ctx.get(None)

    logger.info(
        "request.domain_error",
        extra={"code": exc.code, "path": request.url.path, "status_code": exc.status_code},
    )
    payload = build_error(code=exc.code, message=exc.message, request_id=rid)
    return json_error(payload, status_code=exc.status_code)


async def fallback_handler(request: Request, exc: Exception):

    rid = request_id_ctx.get(None)

    logger.error(
        "unexpected.exception",
        extra={
            "path": request.url.path,
            "method": request.method,
        },
        exc_info=exc,
    )

    payload = build_error(code="SERVER_ERROR", message="Internal Server Error", request_id=rid)
    return json_error(payload, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    rid = request_id_ctx.get(None)
    logger.warning(
        "request.validation_failed",
        extra={
            "errors": [err.get("loc") for err in exc.errors()],
            "path": request.url.path,
        },
    )
    
    payload = build_error(code="BAD_REQUEST", message="invalid request", request_id=rid)
    return json_error(payload, status_code=status.HTTP_400_BAD_REQUEST)


async def http_exception_handler(request: Request, exc: HTTPException):
   
    rid = request_id_ctx.get(None)

    payload = build_error(code=f"HTTP_{exc.status_code}", message=exc.detail, request_id=rid)
    return json_error(payload, status_code=exc.status_code, headers=getattr(exc, "headers", None))


def register_all_exceptions(app: FastAPI):

    app.add_exception_handler(
        Exception, # catch all unidentified/unhandled exceptions
        fallback_handler
    )

    app.add_exception_handler(
        RequestValidationError,
        validation_exception_handler
    )

    app.add_exception_handler(
        HTTPException,
        http_exception_handler
    )

    app.add_exception_handler(
        StorefrontError,
        storefront_error_handler
    )
