"""
Global slowapi rate limiter.

Imported by social_graph/router.py for the follow limit.  Mounted onto
app.state in main.py so slowapi middleware can find it.

Storage: RATE_LIMIT_STORAGE_URI (in-memory unless configured).
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.config import Settings

_settings = Settings()

limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=_settings.rate_limit_storage_uri,
    enabled=_settings.rate_limit_enabled,
)


def follow_rate_limit() -> str:
    return _settings.follow_rate_limit
