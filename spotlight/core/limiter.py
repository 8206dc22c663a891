# spotlight/core/limiter.py
"""
Rate limiter configuration module.
Separated to avoid circular imports.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from spotlight.core.config import settings

# Keyed by client IP. The storage URI decides whether the fixed window is
# per-process (memory://) or shared through Redis.
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
)

public_write_limit = settings.RATE_LIMIT_PUBLIC_WRITES
