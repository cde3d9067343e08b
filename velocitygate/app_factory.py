"""Application assembly for VelocityGate.

Builds the velocity store, analyzer, and reaper as explicit instances owned by
one Litestar app, and ties the reaper's thread to the app lifespan.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from litestar import Litestar, get
from litestar.middleware import DefineMiddleware

from velocitygate.config import Settings, get_settings
from velocitygate.lib.reaper import Reaper
from velocitygate.lib.sliding_window import VelocityWindowStore
from velocitygate.lib.threat import ThreatAnalyzer
from velocitygate.middleware.bot_bouncer import BotBouncerMiddleware

logger = logging.getLogger(__name__)


@get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


def build_analyzer(settings: Settings) -> tuple[ThreatAnalyzer, Reaper]:
    """Create an analyzer and the reaper that keeps its store bounded."""
    gate = settings.velocitygate
    store = VelocityWindowStore(
        idle_threshold=gate.idle_threshold_seconds,
        shards=gate.shards,
    )
    return ThreatAnalyzer(store), Reaper(store, interval=gate.sweep_interval_seconds)


def build_bouncer_middleware(settings: Settings, analyzer: ThreatAnalyzer) -> DefineMiddleware:
    return DefineMiddleware(
        BotBouncerMiddleware,
        analyzer=analyzer,
        enabled=settings.velocitygate.enabled,
    )


def create_app(
    settings: Settings | None = None,
    route_handlers: Sequence[Any] | None = None,
) -> Litestar:
    """Create the Litestar app guarded by the bot bouncer."""
    if settings is None:
        settings = get_settings()

    analyzer, reaper = build_analyzer(settings)
    if not settings.velocitygate.enabled:
        logger.info("VelocityGate is disabled; all traffic will be allowed")

    async def on_startup(_app: Litestar) -> None:
        reaper.start()

    async def on_shutdown(_app: Litestar) -> None:
        reaper.stop()

    app = Litestar(
        on_startup=[on_startup],
        on_shutdown=[on_shutdown],
        route_handlers=[healthz, *(route_handlers or [])],
        middleware=[build_bouncer_middleware(settings, analyzer)],
        debug=settings.debug,
    )
    app.state.threat_analyzer = analyzer
    app.state.reaper = reaper
    return app
