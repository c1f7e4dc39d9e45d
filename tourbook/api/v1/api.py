from fastapi import APIRouter

from .endpoints import admin, cart, public


# Create main API router
api_v1_router = APIRouter()

# Include public endpoints (storefront access)
api_v1_router.include_router(
    public.router,
    prefix="/public",
    tags=["public"]
)

# Include cart endpoints (keyed by cart id)
api_v1_router.include_router(
    cart.router,
    prefix="/cart",
    tags=["cart"]
)

# Include admin endpoints (API key access)
api_v1_router.include_router(
    admin.router,
    tags=["admin"]
)
