"""
Real-time sync client for the shared key-value tree.

The client wraps a :class:`RemoteBackend` with CRUD + subscribe primitives
keyed by hierarchical path, and with deferred-readiness semantics:

- The connection is made once per process (:meth:`SyncClient.connect`).
- Anything requested before the client is ``Ready`` waits in a FIFO queue
  and is replayed, in submission order, when the connection comes up.
  After that, operations run immediately.
- Keys for ``add`` are generated locally, so ``add`` returns the new key
  at call time even while the write itself is still queued.
- Write failures are logged and dropped; they are not retried.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable, Mapping
from typing import Any

from planner.core.config.models import PlannerConfig
from planner.core.remote.backend import (
    ConnectionFailedError,
    ListenerHandle,
    MemoryBackend,
    RemoteBackend,
    RemoteStoreError,
)
from planner.core.remote.paths import join_path, normalize_path
from planner.core.remote.push_ids import PushIdGenerator
from planner.core.remote.state import Connecting, ConnectionState, Disconnected, Ready
from planner.core.timestamps import now_iso

logger = logging.getLogger(__name__)

DONE_STATUS = "done"

Callback = Callable[[Any], None]
Action = Callable[[RemoteBackend], None]


def as_value(value: Any) -> Any:
    """Absent and empty are indistinguishable: both read as ``{}``."""
    return {} if value is None else value


class Subscription:
    """
    A live subscription created by :meth:`SyncClient.subscribe`.

    The callback fires once with the current value and again on every
    change at or under the path, until :meth:`cancel` is called. A
    subscription cancelled while still queued is never attached.
    """

    def __init__(self, client: SyncClient, path: str, callback: Callback) -> None:
        self.client = client
        self.path = path
        self.callback = callback
        self.cancelled = False
        self._handle: ListenerHandle | None = None

    @property
    def active(self) -> bool:
        return not self.cancelled

    @property
    def attached(self) -> bool:
        return self._handle is not None and self._handle.active

    def _attach(self, backend: RemoteBackend) -> None:
        if self.cancelled:
            return
        self._handle = backend.listen(self.path, self._deliver)

    def _deliver(self, value: Any) -> None:
        if not self.cancelled:
            self.callback(as_value(value))

    def cancel(self) -> None:
        if self.cancelled:
            return
        self.cancelled = True
        if self._handle is not None:
            self._handle.cancel()
        self.client._forget(self)

    def __repr__(self) -> str:
        state = "cancelled" if self.cancelled else ("attached" if self.attached else "pending")
        return f"<Subscription {self.path!r} {state}>"


class SyncClient:
    """
    CRUD + subscribe client over a hierarchical real-time store.

    Example:
        >>> client = SyncClient(MemoryBackend())
        >>> key = client.add("attention", {"title": "Order timber"})  # queued
        >>> client.connect()                                          # replayed
        True
        >>> client.get("attention/" + key, lambda item: print(item["title"]))
        Order timber
    """

    def __init__(
        self,
        backend: RemoteBackend,
        *,
        id_generator: PushIdGenerator | None = None,
    ) -> None:
        self._backend = backend
        self._ids = id_generator or PushIdGenerator()
        self._state: ConnectionState = Disconnected()
        self._pending: deque[Action] = deque()
        self._draining = False
        self._subscriptions: list[Subscription] = []

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return isinstance(self._state, Ready)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def subscriptions(self) -> list[Subscription]:
        """Subscriptions that have not been cancelled."""
        return list(self._subscriptions)

    def connect(self) -> bool:
        """
        Connect the backend and replay queued operations.

        Calling again while connecting or connected does nothing. A failed
        attempt returns to ``Disconnected`` with the queue intact.

        Returns:
            True if the client is ready afterwards
        """
        if isinstance(self._state, (Connecting, Ready)):
            return self.is_ready

        self._state = Connecting()
        try:
            self._backend.connect()
        except ConnectionFailedError as e:
            logger.error("Failed to connect to remote store: %s", e)
            self._state = Disconnected(error=str(e))
            return False

        self._state = Ready(self._backend)
        logger.info("Remote store ready; replaying %d queued operation(s)", len(self._pending))
        self._drain()
        return True

    def close(self) -> None:
        """Cancel every subscription and release the backend."""
        for subscription in list(self._subscriptions):
            subscription.cancel()
        self._backend.close()
        self._state = Disconnected()

    def process_events(self, timeout: float = 0.0) -> int:
        """Deliver listener notifications that arrived from the network."""
        if not isinstance(self._state, Ready):
            return 0
        return self._state.backend.process_events(timeout)

    def _submit(self, action: Action) -> None:
        state = self._state
        if isinstance(state, Ready) and not self._draining and not self._pending:
            action(state.backend)
            return
        self._pending.append(action)
        if isinstance(state, Ready) and not self._draining:
            self._drain()
        else:
            logger.debug("Queued remote operation (%d pending)", len(self._pending))

    def _drain(self) -> None:
        state = self._state
        if not isinstance(state, Ready):
            return
        self._draining = True
        try:
            while self._pending:
                action = self._pending.popleft()
                action(state.backend)
        finally:
            self._draining = False

    def _forget(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    def _write(self, backend: RemoteBackend, op: str, path: str, *args: Any) -> None:
        try:
            getattr(backend, op)(path, *args)
        except RemoteStoreError as e:
            logger.warning("Remote %s at %s failed and was dropped: %s", op, path, e)

    # ------------------------------------------------------------------
    # Primitives
    # ------------------------------------------------------------------

    def get(self, path: str, callback: Callback) -> None:
        """
        One-time read. ``callback`` receives the current value, ``{}`` when
        the path is absent or the read failed.
        """
        path = normalize_path(path)

        def action(backend: RemoteBackend) -> None:
            try:
                value = backend.get(path)
            except RemoteStoreError as e:
                logger.warning("Read of %s failed, treating as empty: %s", path, e)
                value = None
            callback(as_value(value))

        self._submit(action)

    def subscribe(self, path: str, callback: Callback) -> Subscription:
        """Register a live listener on a path."""
        subscription = Subscription(self, normalize_path(path), callback)
        self._subscriptions.append(subscription)
        self._submit(subscription._attach)
        return subscription

    def unsubscribe_all(self, path: str) -> int:
        """
        Detach every subscription registered at exactly ``path``.

        Returns:
            Number of subscriptions cancelled
        """
        path = normalize_path(path)
        matching = [s for s in self._subscriptions if s.path == path]
        for subscription in matching:
            subscription.cancel()
        return len(matching)

    def add(self, path: str, record: Mapping[str, Any]) -> str:
        """
        Create a record under a generated key.

        The key is written into the record's ``id`` and ``createdAt`` is
        stamped if missing, before the write is submitted.

        Returns:
            The generated key
        """
        key = self._ids.next_id()
        data = dict(record)
        data["id"] = key
        if not data.get("createdAt"):
            data["createdAt"] = now_iso()
        target = join_path(path, key)
        self._submit(lambda backend: self._write(backend, "set", target, data))
        return key

    def set(self, path: str, value: Any) -> None:
        """Replace the value at a path."""
        target = normalize_path(path)
        self._submit(lambda backend: self._write(backend, "set", target, value))

    def update(self, path: str, partial: Mapping[str, Any]) -> None:
        """Merge fields into a record, stamping ``updatedAt``."""
        target = normalize_path(path)
        data = dict(partial)
        data["updatedAt"] = now_iso()
        self._submit(lambda backend: self._write(backend, "update", target, data))

    def remove(self, path: str) -> None:
        """Delete a record and everything nested under it."""
        target = normalize_path(path)
        self._submit(lambda backend: self._write(backend, "remove", target))

    def set_status(self, path: str, record_id: str, status: str) -> None:
        """
        Change a record's status; ``done`` also stamps ``completedAt``.

        No transition rules are enforced here.
        """
        updates: dict[str, Any] = {"status": status}
        if status == DONE_STATUS:
            updates["completedAt"] = now_iso()
        self.update(join_path(path, record_id), updates)


# ----------------------------------------------------------------------
# Process-wide client
# ----------------------------------------------------------------------

_client: SyncClient | None = None


def create_backend(config: PlannerConfig) -> RemoteBackend:
    """Firebase backend when a database URL is configured, otherwise in-memory."""
    if config.remote.database_url:
        from planner.core.remote.firebase import FirebaseBackend

        return FirebaseBackend(
            config.remote.database_url,
            config.remote.auth_token,
            timeout=config.remote.timeout,
            max_retries=config.http.max_retries,
        )
    logger.info("No remote database configured; using in-memory store")
    return MemoryBackend()


def get_sync_client(config: PlannerConfig) -> SyncClient:
    """
    The process-wide client, created and connected on first use.

    Later calls return the same client regardless of ``config``.
    """
    global _client
    if _client is None:
        _client = SyncClient(create_backend(config))
        _client.connect()
    return _client


def reset_sync_client() -> None:
    """Close and forget the process-wide client."""
    global _client
    if _client is not None:
        _client.close()
    _client = None
