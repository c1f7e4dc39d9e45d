import hmac
from typing import Annotated, Optional
from fastapi import Depends, Header

from .core import AuthenticationError, Settings, get_settings


async def require_admin_key(
    settings: Annotated[Settings, Depends(get_settings)],
    api_key: Optional[str] = Header(None, alias="X-API-Key"),
) -> None:
    """FastAPI dependency that raises 401 unless *api_key* matches ADMIN_API_KEY."""
    if api_key is None:
        raise AuthenticationError("Missing API key")

    # An unset admin key locks the admin routes
    if not settings.ADMIN_API_KEY or not hmac.compare_digest(api_key.encode(), settings.ADMIN_API_KEY.encode()):
        raise AuthenticationError("Invalid API key")
