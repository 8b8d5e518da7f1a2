from slowapi import Limiter
from slowapi.util import get_remote_address

# IP-based key; the only limited route is password sign-in.
limiter = Limiter(key_func=get_remote_address)
