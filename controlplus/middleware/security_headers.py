"""Security headers middleware.

Adds security response headers to API responses. The interactive docs pages
load scripts and styles, so they get every header except the strict CSP.
Raw ASGI.
"""

from typing import Callable

DEFAULT_HEADERS = {
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Cache-Control": "no-store",
}

DOCS_PATH_PREFIXES = ("/docs", "/redoc", "/openapi.json")


def SecurityHeadersMiddleware(
    app: Callable,
    headers: dict[str, str] | None = None,
    docs_prefixes: tuple[str, ...] = DOCS_PATH_PREFIXES,
) -> Callable:
    """Set security headers on HTTP responses that do not already carry them."""
    resolved = headers if headers is not None else DEFAULT_HEADERS.copy()
    api_headers = [(k.lower().encode(), v.encode()) for k, v in resolved.items()]
    docs_headers = [h for h in api_headers if h[0] != b"content-security-policy"]

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        path = scope.get("path", "")
        extra = docs_headers if path.startswith(docs_prefixes) else api_headers

        async def send_wrapper(message: dict) -> None:
            if message["type"] == "http.response.start":
                headers = list(message.get("headers", []))
                present = {name.lower() for name, _ in headers}
                headers.extend(h for h in extra if h[0] not in present)
                message["headers"] = headers
            await send(message)

        await app(scope, receive, send_wrapper)

    return asgi_app
