"""Rate limiter instance for SlowAPI.

Shared so both main (app.state.limiter) and route modules can use the same
instance without circular imports. Limit strings live here only.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

LOGIN_LIMIT = "10/minute"
REGISTER_LIMIT = "5/minute"
PASSWORD_LIMIT = "10/minute"
PROVISION_LIMIT = "20/minute"
WRITE_ENDPOINT_LIMIT = "120/minute"

limit_login = limiter.limit(LOGIN_LIMIT)
limit_register = limiter.limit(REGISTER_LIMIT)
limit_password = limiter.limit(PASSWORD_LIMIT)
limit_provision = limiter.limit(PROVISION_LIMIT)
limit_writes = limiter.limit(WRITE_ENDPOINT_LIMIT)
