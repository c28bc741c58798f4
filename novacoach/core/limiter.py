"""
Rate limiter configuration.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

# Rate limiter keyed by client IP. Generation endpoints cost real provider money.
limiter = Limiter(key_func=get_remote_address)

PLAN_LIMIT = "10/minute"
MEDIA_LIMIT = "5/minute"
CHAT_LIMIT = "30/minute"
