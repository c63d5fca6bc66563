# restaurant_pos/routes/realtime.py
import asyncio
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status
from starlette.concurrency import run_in_threadpool

from restaurant_pos.database import SessionLocal
from restaurant_pos.utils.realtime import TABLES, hub
from restaurant_pos.utils.tokenJWT import user_from_token

router = APIRouter(tags=["Realtime"])
logger = logging.getLogger(__name__)


def _authenticate(token: str):
    db = SessionLocal()
    try:
        return user_from_token(token, db) if token else None
    finally:
        db.close()


async def forward_changes(ws: WebSocket, queue: asyncio.Queue):
    """Send queued change messages until the socket goes away."""
    while True:
        message = await queue.get()
        try:
            await ws.send_json(message)
        except (WebSocketDisconnect, RuntimeError) as e:
            logger.debug("Stopped forwarding changes: %s", e)
            return


async def wait_for_disconnect(ws: WebSocket):
    # Client messages are ignored; this only detects disconnects
    try:
        while True:
            await ws.receive_text()
    except WebSocketDisconnect:
        pass


@router.websocket("/realtime/{table}")
async def table_changes(ws: WebSocket, table: str):
    if table not in TABLES:
        await ws.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    user = await run_in_threadpool(_authenticate, ws.query_params.get("token", ""))
    if user is None:
        await ws.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    # Subscribe before accepting so no change is missed once the client is connected
    sub = hub.subscribe(table)
    await ws.accept()
    logger.info("User %s subscribed to %s changes", user.username, table)
    await ws.send_json({"type": "subscribed", "table": table})

    sender = asyncio.create_task(forward_changes(ws, sub[1]))
    receiver = asyncio.create_task(wait_for_disconnect(ws))
    try:
        done, _ = await asyncio.wait({sender, receiver}, return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            if task.exception() is not None:
                logger.error("Realtime feed for %s failed: %s", table, task.exception())
    finally:
        for task in (sender, receiver):
            task.cancel()
        hub.unsubscribe(table, sub)
        logger.info("User %s unsubscribed from %s changes", user.username, table)
