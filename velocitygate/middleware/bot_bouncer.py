"""Bot blocking middleware for VelocityGate.

Runs every HTTP request through a :class:`ThreatAnalyzer` and answers blocked
requests with a 403 before they reach the application. The client key is the
leftmost x-forwarded-for address (falling back to the peer address) and the
signal is the user-agent header.
"""

import logging

from litestar.types import ASGIApp, Receive, Scope, Send

from velocitygate.lib.client_ip import get_client_ip, get_user_agent
from velocitygate.lib.threat import ThreatAnalyzer
from velocitygate.middleware.helpers import send_forbidden

logger = logging.getLogger(__name__)


class BotBouncerMiddleware:
    """ASGI middleware that rejects bot and high-velocity traffic.

    Args:
        app: The ASGI application to wrap.
        analyzer: The analyzer that owns velocity state for this app.
        enabled: When False every request passes without analysis.
    """

    def __init__(
        self,
        app: ASGIApp,
        analyzer: ThreatAnalyzer,
        enabled: bool = True,
    ) -> None:
        self.app = app
        self.analyzer = analyzer
        self.enabled = enabled

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not self.enabled:
            await self.app(scope, receive, send)
            return

        client_ip = get_client_ip(scope)
        verdict = self.analyzer.evaluate(client_ip, get_user_agent(scope))

        if verdict.blocked:
            logger.info(
                "Blocked request from %s to %s (%s)",
                client_ip or "<unknown>",
                scope.get("path", "/"),
                verdict.reason.value,
            )
            await send_forbidden(send)
            return

        await self.app(scope, receive, send)
