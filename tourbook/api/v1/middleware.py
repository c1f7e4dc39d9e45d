import logging
import re
import uuid
from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.middleware.base import BaseHTTPMiddleware

from ...core import BaseError

logger = logging.getLogger(__name__)

CART_ID_HEADER = "X-Cart-Id"
CART_ID_COOKIE = "cart_id"
_CART_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


class CartIDMiddleware(BaseHTTPMiddleware):
    """Middleware to extract and manage the visitor's cart id"""

    async def dispatch(self, request: Request, call_next):
        # Extract cart ID from headers or cookies
        cart_id = request.headers.get(CART_ID_HEADER) or request.cookies.get(CART_ID_COOKIE)

        # If missing or malformed, generate a new one
        if not cart_id or not _CART_ID_PATTERN.match(cart_id):
            cart_id = uuid.uuid4().hex

        # Store in request state for use in route handlers
        request.state.cart_id = cart_id

        response = await call_next(request)

        response.headers[CART_ID_HEADER] = cart_id
        if request.cookies.get(CART_ID_COOKIE) != cart_id:
            response.set_cookie(
                CART_ID_COOKIE,
                cart_id,
                max_age=2592000,  # 30 days
                httponly=True,
                samesite="lax"
            )

        return response


async def base_error_handler(request: Request, exc: BaseError):
    """Handler for application errors"""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.message,
            "details": exc.details
        }
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handler for request validation errors"""
    errors = []
    for error in exc.errors():
        errors.append({
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"]
        })

    return JSONResponse(
        status_code=422,
        content={
            "error": "Validation error",
            "details": {"errors": errors}
        }
    )
