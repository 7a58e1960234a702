"""
Domain errors and the handlers that render them.

Every error reaches the client as ``{"message": ...}``. Domain errors carry
their own status code; anything unexpected becomes a 500 with the raw
exception text.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class StorefrontError(Exception):
    status_code = 400
    default_message = "Request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(StorefrontError):
    status_code = 400


class NotFoundError(StorefrontError):
    status_code = 404
    default_message = "Not found"


class ConflictError(StorefrontError):
    status_code = 409
    default_message = "Already exists"


# checkout
class EmptyCartError(StorefrontError):
    default_message = "Cart is empty"


class InsufficientStockError(StorefrontError):
    def __init__(self, product_title: str):
        self.product_title = product_title
        super().__init__(f"Insufficient stock for {product_title}")


class ProductNotFoundError(NotFoundError):
    def __init__(self, product_id=None):
        self.product_id = product_id
        super().__init__("Product not found" if product_id is None else f"Product not found: {product_id}")


class OrderNotFoundError(NotFoundError):
    default_message = "Order not found"


# coupons
class CouponNotFoundError(NotFoundError):
    default_message = "Invalid coupon code"


class CouponInactiveError(StorefrontError):
    default_message = "Coupon is inactive"


class CouponExpiredError(StorefrontError):
    default_message = "Coupon has expired"


class UsageLimitExceededError(StorefrontError):
    default_message = "Coupon usage limit exceeded"


class MinimumAmountError(StorefrontError):
    def __init__(self, min_order_amount: int):
        self.min_order_amount = min_order_amount
        super().__init__(f"Minimum order amount of {min_order_amount} required")


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StorefrontError)
    async def storefront_error(request: Request, exc: StorefrontError):
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"message": exc.detail}, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        field = ".".join(str(p) for p in first.get("loc", ())[1:])
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg", "Invalid request"))
        return JSONResponse(status_code=422, content={"message": message})

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        logger.exception("unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"message": str(exc)})
