"""ASGI entry point: ``velocitygate.asgi:app``."""

from velocitygate.app_factory import create_app

app = create_app()
