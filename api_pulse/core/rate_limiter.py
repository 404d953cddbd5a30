"""Rate limiter shared by the API routers, keyed on client address."""

from slowapi import Limiter
from slowapi.util import get_remote_address

# Per-route limits are declared on each router with @limiter.limit
limiter = Limiter(key_func=get_remote_address)
