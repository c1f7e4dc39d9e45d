"""Application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Depends
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from .core import BaseError, get_settings
from .deps import get_session_factory
from .infrastructure import BookingApiClient, make_engine, make_session_factory, session_scope
from .api.v1.api import api_v1_router
from .api.v1.middleware import CartIDMiddleware, base_error_handler, validation_exception_handler

# Rate limiting
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

logger = logging.getLogger(__name__)

settings = get_settings()
limiter = Limiter(key_func=get_remote_address, default_limits=[settings.RATE_LIMIT_DEFAULT])


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    engine = make_engine()
    app.state.session_factory = make_session_factory(engine)
    app.state.booking_client = BookingApiClient()
    logger.info("Cart store ready at %s; booking server %s", engine.url, settings.BOOKING_API_URL)

    yield

    # Shutdown
    await app.state.booking_client.aclose()
    engine.dispose()


# Create FastAPI app
app = FastAPI(
    title="Tourbook API",
    description="Tour availability, pricing and booking API",
    version="1.0.0",
    lifespan=lifespan
)

# Attach rate-limiter
app.state.limiter = limiter

# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Cart-Id"]
)

app.add_middleware(CartIDMiddleware)

# Rate limiting
@app.exception_handler(RateLimitExceeded)
async def ratelimit_handler(request: Request, exc: RateLimitExceeded):
    return PlainTextResponse("Too many requests", status_code=429)

app.add_middleware(SlowAPIMiddleware)

# Exception handling
app.add_exception_handler(BaseError, base_error_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)

# Include v1 API with all endpoints
app.include_router(api_v1_router, prefix="/api/v1")


# Health check
@app.get("/healthz")
@limiter.exempt
def healthz(request: Request, factory: sessionmaker = Depends(get_session_factory)):
    """Health check endpoint."""
    status = {"db": "ok"}

    try:
        with session_scope(factory) as session:
            session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Health check could not reach the cart database")
        status["db"] = "error"

    return status
