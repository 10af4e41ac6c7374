#!/usr/bin/env python3
"""Agent entrypoint — wires all components and stays connected until stopped.

Usage::

    # Run with default config (env: SERVER_URL, CLIENT_ID, SOUNDS_DIR)
    python scripts/run.py

    # Custom config file
    python scripts/run.py --config config/settings.yaml

    # Override log level
    python scripts/run.py --log-level DEBUG
"""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys

import structlog
from aiohttp import web

from src.agent.factory import create_agent_stack
from src.control.server import start_control_server
from src.core.config import ConfigError, load_settings, prepare_sounds_dir
from src.core.logging import setup_logging

logger = structlog.get_logger(__name__)


async def run(args: argparse.Namespace) -> int:
    """Start all components and run until interrupted."""
    settings = load_settings(args.config)
    setup_logging(level=args.log_level)

    logger.info("agent_starting")

    try:
        sounds_dir = prepare_sounds_dir(settings.agent.sounds_dir)
    except ConfigError:
        logger.exception("config_error")
        return 1

    logger.info(
        "configuration_loaded",
        server_url=settings.agent.server_url,
        client_id=settings.agent.client_id,
        sounds_dir=str(sounds_dir),
    )

    stack = create_agent_stack(settings)

    # ── Control API ──────────────────────────────────────────────
    runner: web.AppRunner | None = None
    if settings.control.enabled:
        try:
            runner = await start_control_server(
                stack.dispatcher,
                status_fn=stack.status,
                host=settings.control.host,
                port=settings.control.port,
            )
            logger.info(
                "control_api_listening",
                host=settings.control.host,
                port=settings.control.port,
            )
        except OSError:
            logger.exception("control_api_unavailable")

    # ── Start everything ─────────────────────────────────────────
    await stack.dispatcher.start()
    await stack.reconnector.start()

    try:
        stack.display.show_simple(
            "Notification Agent Started",
            f"Connected to: {settings.agent.server_url}",
        )
    except Exception:
        logger.warning("startup_notification_failed", exc_info=True)

    # ── Wait for shutdown signal ─────────────────────────────────
    stop_event = asyncio.Event()

    def _signal_handler() -> None:
        logger.info("shutdown_signal_received")
        stop_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _signal_handler)
        except NotImplementedError:
            # Windows: signal handlers not supported on ProactorEventLoop
            pass

    try:
        await stop_event.wait()
    except KeyboardInterrupt:
        logger.info("keyboard_interrupt")

    # ── Graceful shutdown ────────────────────────────────────────
    logger.info("agent_shutting_down")

    stack.outbound.close()
    await stack.reconnector.stop()
    await stack.dispatcher.stop()
    await stack.registry.close()
    await stack.sound.close()
    if runner is not None:
        await runner.cleanup()

    logger.info(
        "agent_stopped",
        attempts=stack.reconnector.attempts,
        pending=stack.registry.count(),
        confirmed=stack.registry.confirmed_count,
        auto_confirmed=stack.registry.expired_count,
    )
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Run the desktop notification agent.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level override: DEBUG, INFO, WARNING, ERROR",
    )
    args = parser.parse_args()

    code = asyncio.run(run(args))
    sys.exit(code)


if __name__ == "__main__":
    main()
