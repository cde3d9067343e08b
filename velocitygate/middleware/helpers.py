"""Shared helpers for ASGI middleware."""

from litestar.types import Send

DENIED_RESPONSE_BODY = b"VelocityGate: Access Denied"


async def send_forbidden(send: Send) -> None:
    """Send the plain-text 403 response used for blocked requests."""
    await send({
        "type": "http.response.start",
        "status": 403,
        "headers": [(b"content-type", b"text/plain; charset=utf-8")],
    })
    await send({"type": "http.response.body", "body": DENIED_RESPONSE_BODY})
