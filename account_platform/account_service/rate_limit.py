from slowapi import Limiter
from slowapi.util import get_remote_address

from .config import Settings

# Off until an app configures it; route decorators bind to this instance at import.
limiter = Limiter(key_func=get_remote_address, enabled=False)

_api_rate_limit = "500/hour"


def api_rate_limit() -> str:
    """Per-client limit for the /api routes, read on every request."""
    return _api_rate_limit


def configure_limiter(settings: Settings) -> Limiter:
    global _api_rate_limit
    _api_rate_limit = settings.RATE_LIMIT
    limiter.enabled = settings.rate_limit_enabled
    limiter.reset()
    return limiter
