from __future__ import annotations

from slowapi import Limiter
from slowapi.util import get_remote_address

# Per-client throttling; on the verify route it bounds token guessing.
limiter = Limiter(key_func=get_remote_address, headers_enabled=False)
