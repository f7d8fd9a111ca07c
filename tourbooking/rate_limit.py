"""
Rate limiting configuration using slowapi.

Three tiers:
  • validate – pre-flight booking validation (cheap to spam, so tighter)
  • write    – create / update / delete endpoints
  • default  – everything else

The limiter keys on client IP by default.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from tourbooking.config import RATE_LIMIT_DEFAULT, RATE_LIMIT_VALIDATE, RATE_LIMIT_WRITE

limiter = Limiter(key_func=get_remote_address, default_limits=[RATE_LIMIT_DEFAULT])

# Named rate strings for use in @limiter.limit() decorators
VALIDATE = RATE_LIMIT_VALIDATE
WRITE = RATE_LIMIT_WRITE
DEFAULT = RATE_LIMIT_DEFAULT
