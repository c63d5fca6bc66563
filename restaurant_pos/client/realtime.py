# restaurant_pos/client/realtime.py
import asyncio
import json
import logging
from typing import Any, Callable, Dict, Iterable, Optional
from urllib.parse import urlencode

import websockets

logger = logging.getLogger(__name__)

CONNECTED = "connected"
RECONNECTING = "reconnecting"
ERROR = "error"


class RealtimeListener:
    """Follows the change feed of several tables and forwards each change.

    ``on_change`` receives the decoded ``{"table", "event", "record"}``
    message (typically ``PosStore.handle_change``). ``on_status`` is told
    about ``connected`` / ``reconnecting`` / ``error`` transitions.
    """

    def __init__(self, ws_url: str, token: str, tables: Iterable[str],
                 on_change: Callable[[Dict[str, Any]], Any],
                 on_status: Optional[Callable[[str], None]] = None,
                 reconnect_delay: float = 2.0):
        self.ws_url = ws_url.rstrip("/")
        self.token = token
        self.tables = list(tables)
        self.on_change = on_change
        self.on_status = on_status
        self.reconnect_delay = reconnect_delay
        self.status = RECONNECTING
        self._tasks = []

    def _set_status(self, status: str):
        if status != self.status:
            self.status = status
            if self.on_status:
                self.on_status(status)

    def url_for(self, table: str) -> str:
        return f"{self.ws_url}/realtime/{table}?{urlencode({'token': self.token})}"

    def dispatch(self, raw: str) -> bool:
        """Decode one frame; returns True when it was a change event."""
        try:
            message = json.loads(raw)
        except ValueError:
            logger.warning("Ignoring malformed realtime frame: %r", raw)
            return False
        if message.get("type") == "subscribed":
            logger.info("Successfully subscribed to %s changes.", message.get("table"))
            self._set_status(CONNECTED)
            return False
        if "table" not in message or "event" not in message:
            return False
        self.on_change(message)
        return True

    async def _follow(self, table: str):
        while True:
            try:
                async with websockets.connect(self.url_for(table)) as ws:
                    async for raw in ws:
                        self.dispatch(raw)
            except asyncio.CancelledError:
                raise
            except (OSError, websockets.exceptions.WebSocketException) as e:
                logger.error("Realtime connection for %s failed: %s", table, e)
                self._set_status(ERROR)
            else:
                logger.warning("Realtime connection for %s closed by server", table)
            self._set_status(RECONNECTING)
            await asyncio.sleep(self.reconnect_delay)

    async def run(self):
        self._tasks = [asyncio.create_task(self._follow(t)) for t in self.tables]
        try:
            await asyncio.gather(*self._tasks)
        finally:
            for task in self._tasks:
                task.cancel()

    def stop(self):
        for task in self._tasks:
            task.cancel()
