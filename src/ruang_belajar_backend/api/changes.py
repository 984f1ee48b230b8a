'''
WebSocket endpoint streaming "collection changed" events to clients.

Each message is {"kind": "<classes|students|payments|expenses>"}; on receipt a
client re-fetches that whole collection.
'''
import asyncio
import contextlib
from typing import Annotated
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from ..common.logger import log
from ..services.change_feed import ChangeFeed, get_change_feed

class ChangesAPI:
    """
    A class to encapsulate the change notification endpoint.
    """
    def __init__(self):
        self.router = APIRouter(tags=["Changes"])
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_websocket_route("/changes", self.stream_changes)

    async def _forward(self, websocket: WebSocket, queue: asyncio.Queue) -> None:
        while True:
            kind = await queue.get()
            await websocket.send_json({"kind": kind.value})

    async def stream_changes(
        self,
        websocket: WebSocket,
        change_feed: Annotated[ChangeFeed, Depends(get_change_feed)]
    ):
        async with change_feed.stream() as queue:
            await websocket.accept()
            log.info("Change stream client connected.")
            forwarder = asyncio.create_task(self._forward(websocket, queue))
            try:
                # clients never send anything meaningful, reading only detects the disconnect
                while True:
                    await websocket.receive_text()
            except WebSocketDisconnect:
                log.info("Change stream client disconnected.")
            finally:
                forwarder.cancel()
                # a failed send ends the forwarder early, its error is collected here
                with contextlib.suppress(asyncio.CancelledError, Exception):
                    await forwarder

# Instantiate the class and export its router
changes_api = ChangesAPI()
router = changes_api.router
