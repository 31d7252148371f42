"""Realtime listeners over the Firestore REST API.

REST v1 has no push channel, so each listener is an asyncio task that polls
its collection or document and invokes the callback when the result differs
from the previous one. The first successful poll always fires the callback.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from controlplus.infrastructure.firebase._rest_client import FirestoreRESTClient

logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[Any], Awaitable[None] | None]
ErrorCallback = Callable[[Exception], Awaitable[None] | None]


async def _maybe_await(result: Any) -> None:
    if inspect.isawaitable(result):
        await result


class ListenerRegistration:
    """Handle returned by watch_*; call unsubscribe() to stop the listener."""

    def __init__(self, path: str, task: asyncio.Task) -> None:
        self.path = path
        self._task = task

    @property
    def active(self) -> bool:
        return not self._task.done()

    def unsubscribe(self) -> None:
        """Cancel the polling task. Safe to call more than once."""
        if not self._task.done():
            self._task.cancel()

    async def wait_closed(self) -> None:
        """Wait until the polling task has finished after unsubscribe()."""
        try:
            await self._task
        except asyncio.CancelledError:
            pass


class PollingWatcher:
    """Creates polling listeners bound to one Firestore client."""

    def __init__(self, client: FirestoreRESTClient, interval_seconds: float) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._client = client
        self._interval = interval_seconds

    def watch_collection(
        self,
        path: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback | None = None,
    ) -> ListenerRegistration:
        """Listen to every document in a collection.

        on_snapshot receives a list of dicts, each the document data plus "id".
        """

        async def fetch() -> list[dict[str, Any]]:
            return [
                {"id": doc.id, **doc.to_dict()}
                async for doc in self._client.collection(path).stream()
            ]

        return self._start(path, fetch, on_snapshot, on_error)

    def watch_document(
        self,
        path: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback | None = None,
    ) -> ListenerRegistration:
        """Listen to one document; on_snapshot receives its data or None."""

        async def fetch() -> dict[str, Any] | None:
            snap = await self._client.document(path).get()
            return {"id": snap.id, **snap.to_dict()} if snap else None

        return self._start(path, fetch, on_snapshot, on_error)

    def _start(
        self,
        path: str,
        fetch: Callable[[], Awaitable[Any]],
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback | None,
    ) -> ListenerRegistration:
        task = asyncio.create_task(
            self._poll(path, fetch, on_snapshot, on_error),
            name=f"listener:{path}",
        )
        return ListenerRegistration(path, task)

    async def _poll(
        self,
        path: str,
        fetch: Callable[[], Awaitable[Any]],
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback | None,
    ) -> None:
        sentinel = object()
        last: Any = sentinel
        while True:
            try:
                current = await fetch()
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                logger.warning("Listener poll failed for %s: %s", path, exc)
                if on_error is not None:
                    await _maybe_await(on_error(exc))
            else:
                if last is sentinel or current != last:
                    last = current
                    try:
                        await _maybe_await(on_snapshot(current))
                    except asyncio.CancelledError:
                        raise
                    except Exception:
                        logger.exception("Listener callback failed for %s", path)
            await asyncio.sleep(self._interval)
