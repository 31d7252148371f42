"""Raw ASGI middleware: request id and security headers."""

from controlplus.middleware.request_id import RequestIDMiddleware, request_id_var
from controlplus.middleware.security_headers import SecurityHeadersMiddleware

__all__ = [
    "RequestIDMiddleware",
    "SecurityHeadersMiddleware",
    "request_id_var",
]
