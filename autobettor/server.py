"""
Operator endpoints.

  GET /        plain "Bot Active"
  GET /health  liveness probe
  GET /state   the full persisted state as JSON

The server runs on its own event loop in a daemon thread so the scheduler
keeps the main thread.
"""

import asyncio
import logging
import threading

from aiohttp import web

from autobettor.trading.state import StateStore

logger = logging.getLogger(__name__)

STORE_KEY = web.AppKey("store", StateStore)


async def handle_index(request: web.Request) -> web.Response:
    return web.Response(text="Bot Active")


async def handle_health(request: web.Request) -> web.Response:
    return web.json_response({"status": "ok"})


async def handle_state(request: web.Request) -> web.Response:
    store = request.app[STORE_KEY]
    state = await asyncio.get_running_loop().run_in_executor(None, store.load)
    return web.json_response(state.to_dict())


def create_app(store: StateStore) -> web.Application:
    app = web.Application()
    app[STORE_KEY] = store
    app.router.add_get("/", handle_index)
    app.router.add_get("/health", handle_health)
    app.router.add_get("/state", handle_state)
    return app


def start_server_thread(store: StateStore, host: str, port: int) -> threading.Thread:
    """Serve ``create_app(store)`` in the background. Returns the thread."""

    def _serve():
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        runner = web.AppRunner(create_app(store), handle_signals=False)
        loop.run_until_complete(runner.setup())
        site = web.TCPSite(runner, host, port)
        loop.run_until_complete(site.start())
        logger.info("Server on %s:%d", host, port)
        try:
            loop.run_forever()
        finally:
            loop.run_until_complete(runner.cleanup())
            loop.close()

    thread = threading.Thread(target=_serve, name="autobettor-server", daemon=True)
    thread.start()
    return thread
