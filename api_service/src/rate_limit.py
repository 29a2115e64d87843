"""Shared slowapi limiter for the expensive endpoints (process, join)."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from shared_utils.config_loader import get_settings


settings = get_settings()

limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)
