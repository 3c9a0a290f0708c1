"""Shared slowapi limiter."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from todo_api.config import get_settings

settings = get_settings()

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.API_RATE_LIMIT])

# One bucket per client across every authenticated API route.
api_limit = limiter.shared_limit(settings.API_RATE_LIMIT, scope="api")
