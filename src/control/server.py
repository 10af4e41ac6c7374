"""Local control API — lets the user confirm alerts and inspect the agent.

Runs as an ``aiohttp`` web server alongside the agent. Exposes:
- ``GET /api/status``                    → JSON agent status
- ``GET /api/pending``                   → JSON pending alert ids
- ``POST /api/alerts/{alert_id}/confirm`` → confirm one alert
"""

from __future__ import annotations

from typing import Any, Callable

from aiohttp import web

from src.agent.dispatcher import AlertDispatcher

StatusFn = Callable[[], dict[str, Any]]

CONFIRM_PATH = "/api/alerts/{alert_id}/confirm"


async def _handle_status(request: web.Request) -> web.Response:
    dispatcher: AlertDispatcher = request.app["dispatcher"]
    status_fn: StatusFn | None = request.app.get("status_fn")
    data: dict[str, Any] = dict(status_fn()) if status_fn else {}
    data["pending"] = dispatcher.pending_count()
    return web.json_response(data)


async def _handle_pending(request: web.Request) -> web.Response:
    dispatcher: AlertDispatcher = request.app["dispatcher"]
    ids = sorted(dispatcher.pending_ids())
    return web.json_response({"count": len(ids), "pending": ids})


async def _handle_confirm(request: web.Request) -> web.Response:
    dispatcher: AlertDispatcher = request.app["dispatcher"]
    alert_id = request.match_info["alert_id"]
    # A miss is not an error for the caller: still 200.
    confirmed = await dispatcher.confirm(alert_id)
    return web.json_response({"alert_id": alert_id, "confirmed": confirmed})


def create_control_app(
    dispatcher: AlertDispatcher,
    status_fn: StatusFn | None = None,
) -> web.Application:
    """Create the aiohttp control application."""
    app = web.Application()
    app["dispatcher"] = dispatcher
    app["status_fn"] = status_fn
    app.router.add_get("/api/status", _handle_status)
    app.router.add_get("/api/pending", _handle_pending)
    app.router.add_post(CONFIRM_PATH, _handle_confirm)
    return app


async def start_control_server(
    dispatcher: AlertDispatcher,
    status_fn: StatusFn | None = None,
    host: str = "127.0.0.1",
    port: int = 8765,
) -> web.AppRunner:
    """Start the control server. Returns the runner for cleanup."""
    app = create_control_app(dispatcher, status_fn)
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()
    return runner
