# spotlight/api/deps.py
import secrets
from typing import Any, Dict

from fastapi import HTTPException, Request, Security, status
from fastapi.security import APIKeyHeader

from spotlight.core.config import settings
from spotlight.db.session import get_db  # noqa: F401  (re-exported for endpoints)

admin_key_header = APIKeyHeader(name="X-Admin-Key", auto_error=False)


def require_admin_key(api_key: str | None = Security(admin_key_header)) -> str:
    """
    Checks the shared admin secret from the X-Admin-Key header.
    """
    if api_key and secrets.compare_digest(api_key, settings.ADMIN_API_KEY):
        return api_key
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or missing admin key",
    )


async def get_raw_json_body(request: Request) -> Dict[str, Any]:
    """
    The request body exactly as the client sent it, before pydantic drops
    unknown keys or coerces values. Starlette caches the parsed body, so
    this does not read the stream a second time.
    """
    body = await request.json()
    return body if isinstance(body, dict) else {"body": body}
