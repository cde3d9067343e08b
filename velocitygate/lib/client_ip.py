"""Client IP extraction from ASGI scope."""

from litestar.types import Scope


def _first_header(scope: Scope, name: bytes) -> bytes | None:
    for key, value in scope.get("headers", []):
        if key.lower() == name:
            return value
    return None


def get_client_ip(scope: Scope) -> str:
    """Extract client IP, checking x-forwarded-for first.

    Only the first x-forwarded-for line is used. Returns an empty string when
    neither source is available.
    """
    forwarded = _first_header(scope, b"x-forwarded-for")
    if forwarded and forwarded.strip():
        return forwarded.decode("latin-1").split(",")[0].strip()
    client = scope.get("client")
    if client:
        return client[0]
    return ""


def get_user_agent(scope: Scope) -> str | None:
    """Return the user-agent header, or None if the client sent none."""
    user_agent = _first_header(scope, b"user-agent")
    if user_agent is None:
        return None
    return user_agent.decode("latin-1")
