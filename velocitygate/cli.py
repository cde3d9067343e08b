"""CLI commands for VelocityGate."""

import logging
from pathlib import Path

import click

from velocitygate.config import set_config_path


@click.group()
@click.version_option(package_name="velocitygate")
@click.option(
    "-f",
    "--config-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to the YAML config file (default: app.yaml)",
)
def cli(config_file):
    """VelocityGate - in-process bot and request-velocity blocking."""
    if config_file is not None:
        set_config_path(config_file)


@cli.command()
@click.option("--host", default="127.0.0.1", help="Host to bind to")
@click.option("--port", default=8080, type=int, help="Port to bind to")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")
@click.option("--workers", default=1, type=int, help="Number of worker processes")
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(["debug", "info", "warning", "error"]),
    help="Logging level",
)
def serve(host, port, reload, workers, log_level):
    """Run the VelocityGate demo server."""
    import asyncio
    import signal

    from hypercorn.asyncio import serve as hypercorn_serve
    from hypercorn.config import Config

    logging.basicConfig(level=log_level.upper())

    config = Config()
    config.application_path = "velocitygate.asgi:app"
    config.bind = [f"{host}:{port}"]
    config.workers = 1 if reload else workers
    config.loglevel = log_level.upper()
    config.include_server_header = False

    if reload:
        config.use_reloader = True
        from hypercorn.run import run
        run(config)
        return

    from velocitygate.asgi import app

    shutdown_event = asyncio.Event()

    loop = asyncio.new_event_loop()
    loop.add_signal_handler(signal.SIGINT, shutdown_event.set)
    loop.add_signal_handler(signal.SIGTERM, shutdown_event.set)
    try:
        loop.run_until_complete(
            hypercorn_serve(app, config, shutdown_trigger=shutdown_event.wait)
        )
    finally:
        loop.close()


@cli.command()
@click.argument("signal", required=False)
@click.option("--key", default="127.0.0.1", help="Client key (normally an IP address)")
@click.option("--repeat", default=1, type=click.IntRange(min=1), help="Number of requests to simulate")
def classify(signal, key, repeat):
    """Classify a user-agent SIGNAL as a fresh analyzer would.

    Repeated requests share one velocity window, so --repeat 51 shows the
    velocity block kick in.
    """
    from velocitygate.lib.sliding_window import VelocityWindowStore
    from velocitygate.lib.threat import ThreatAnalyzer

    analyzer = ThreatAnalyzer(VelocityWindowStore())
    for i in range(1, repeat + 1):
        verdict = analyzer.evaluate(key, signal)
        if verdict.blocked:
            detail = verdict.reason.value
            if verdict.signature:
                detail += f" '{verdict.signature}'"
            click.echo(f"{i}: blocked ({detail}, velocity={verdict.velocity})")
        else:
            click.echo(f"{i}: allowed (velocity={verdict.velocity})")


@cli.command()
def signatures():
    """List the user-agent tokens treated as automation."""
    from velocitygate.lib.signatures import BOT_SIGNATURES

    for token in BOT_SIGNATURES:
        click.echo(token)


if __name__ == "__main__":
    cli()
