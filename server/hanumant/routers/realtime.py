import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from hanumant.auth.deps import identity_from_token
from hanumant.auth.identity import Identity
from hanumant.core.clock import LibraryClock, get_clock
from hanumant.core.config import settings
from hanumant.core.db import get_db
from hanumant.services.activity_log import ActivityLog
from hanumant.services.chat import room_members
from hanumant.services.fee_cycle import FeeCycleEngine
from hanumant.services.realtime import PRIVATE_ROOM_PREFIX, SnapshotHub, is_known_path, load_snapshot
from hanumant.services.store import LibraryStore

router = APIRouter(tags=["realtime"])
logger = logging.getLogger(__name__)

MEMBER_PATHS = {"attendance", "dues", "chat/group", "notifications", "settings"}
MEMBER_SCOPED_PATHS = {"attendance", "dues", "notifications"}

WS_UNAUTHORIZED = 4401
WS_FORBIDDEN = 4403


def can_subscribe(identity: Identity, path: str) -> bool:
    if identity.is_admin:
        return True
    if identity.member is None:
        return False
    if path in MEMBER_PATHS:
        return True
    if path.startswith(PRIVATE_ROOM_PREFIX):
        return str(identity.member.id) in room_members(path[len(PRIVATE_ROOM_PREFIX):])
    return False


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


def _snapshot(db: Session, hub: SnapshotHub, clock: LibraryClock, path: str, member_id: Optional[int]):
    # end the previous read so the next one sees rows committed elsewhere
    db.rollback()
    if path == "dues":
        store = LibraryStore(db, hub)
        engine = FeeCycleEngine(store, clock, ActivityLog(store, clock), cycle_days=settings.FEE_CYCLE_DAYS)
        engine.reconcile_overdue()
    return load_snapshot(db, path, member_id=member_id)


@router.websocket("/realtime/{path:path}")
async def realtime_feed(
    websocket: WebSocket,
    path: str,
    token: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
    clock: LibraryClock = Depends(get_clock),
) -> None:
    """Send the snapshot of ``path`` now and again after every commit touching it."""
    if not token:
        await websocket.close(code=WS_UNAUTHORIZED)
        return
    try:
        identity = await run_in_threadpool(identity_from_token, db, token)
    except HTTPException as exc:
        code = WS_UNAUTHORIZED if exc.status_code == status.HTTP_401_UNAUTHORIZED else WS_FORBIDDEN
        await websocket.close(code=code)
        return
    if not is_known_path(path) or not can_subscribe(identity, path):
        await websocket.close(code=WS_FORBIDDEN)
        return

    member_id = None
    if not identity.is_admin and path in MEMBER_SCOPED_PATHS:
        member_id = identity.member.id

    hub = websocket.app.state.hub
    await websocket.accept()
    subscription = hub.subscribe(path)
    logger.info("realtime_connected", extra={"path": path, "uid": identity.uid})
    disconnected = asyncio.ensure_future(_wait_for_disconnect(websocket))
    try:
        while True:
            data = await run_in_threadpool(_snapshot, db, hub, clock, path, member_id)
            await websocket.send_json({"path": path, "data": data})
            notice = asyncio.ensure_future(subscription.queue.get())
            done, _ = await asyncio.wait({notice, disconnected}, return_when=asyncio.FIRST_COMPLETED)
            if disconnected in done:
                notice.cancel()
                break
    except WebSocketDisconnect:
        logger.debug("realtime_send_after_disconnect", extra={"path": path})
    finally:
        disconnected.cancel()
        hub.unsubscribe(subscription)
        logger.info("realtime_disconnected", extra={"path": path, "uid": identity.uid})
