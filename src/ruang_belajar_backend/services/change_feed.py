'''
In-process "collection changed" notifications.

Writers publish the EntityKind they touched (after commit, see get_db_session),
listeners react by re-fetching that whole collection. The feed knows nothing
about the transport: the /changes websocket and the LedgerSnapshot are both
plain listeners.
'''
import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable

from fastapi.requests import HTTPConnection

from ..common.exceptions import UnknownEntityKindError
from ..common.logger import log
from ..database.db_enums import EntityKind

Listener = Callable[[EntityKind], None]


class ChangeFeed:
    """Fan-out of change events to every subscribed listener."""

    def __init__(self):
        self._listeners: list[Listener] = []

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Registers a listener and returns the function that removes it again."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, kind: EntityKind | str) -> None:
        try:
            kind = EntityKind(kind)
        except ValueError as e:
            raise UnknownEntityKindError(f"Unknown collection '{kind}'.") from e

        log.info(f"Collection changed: {kind.value}")
        for listener in list(self._listeners):
            try:
                listener(kind)
            except Exception as e:
                # one broken listener must not starve the others
                log.error(f"Change listener {listener!r} failed for '{kind.value}': {e}", exc_info=True)

    @asynccontextmanager
    async def stream(self, max_pending: int = 100) -> AsyncIterator[asyncio.Queue]:
        """
        Subscribes a queue for the duration of the block.
        When a slow consumer lets the queue fill up, the oldest event is dropped;
        consumers only need to know *that* a collection changed.
        """
        queue: asyncio.Queue[EntityKind] = asyncio.Queue(maxsize=max_pending)

        def enqueue(kind: EntityKind) -> None:
            if queue.full():
                queue.get_nowait()
            queue.put_nowait(kind)

        unsubscribe = self.subscribe(enqueue)
        try:
            yield queue
        finally:
            unsubscribe()


def get_change_feed(connection: HTTPConnection) -> ChangeFeed:
    """FastAPI dependency returning the feed created by the app's lifespan."""
    return connection.app.state.change_feed
