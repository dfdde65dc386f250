"""
Backends for the remote sync client.

A backend talks to one hierarchical store. It is deliberately thin: no
queuing, no key generation, no timestamp stamping. That policy lives in
:class:`planner.core.remote.client.SyncClient`.

The default implementation, :class:`MemoryBackend`, keeps the tree in
process and delivers change notifications synchronously, inside the write
that caused them.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import Any

from planner.core.remote.paths import is_related, normalize_path, split_path
from planner.core.remote.tree import get_node, set_node, update_node

logger = logging.getLogger(__name__)

ValueCallback = Callable[[Any], None]


class RemoteStoreError(Exception):
    """A remote store operation failed."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class ConnectionFailedError(RemoteStoreError):
    """The backend could not establish its connection."""


class ListenerHandle:
    """
    A live listener registered with a backend.

    Calling :meth:`cancel` detaches it; no further callbacks are delivered.
    """

    def __init__(self, backend: RemoteBackend, path: str, callback: ValueCallback) -> None:
        self.backend = backend
        self.path = path
        self.callback = callback
        self.active = True
        # last value delivered, used to suppress no-op notifications
        self.last_value: Any = None
        self.delivered = False

    def deliver(self, value: Any) -> None:
        if not self.active:
            return
        if self.delivered and value == self.last_value:
            return
        self.last_value = value
        self.delivered = True
        self.callback(value)

    def cancel(self) -> None:
        if not self.active:
            return
        self.active = False
        self.backend.detach(self)

    def __repr__(self) -> str:
        state = "active" if self.active else "cancelled"
        return f"<ListenerHandle {self.path!r} {state}>"


class RemoteBackend(ABC):
    """
    Abstract hierarchical store.

    Paths are normalized slash-separated strings (see ``paths``). Values
    are JSON-compatible; ``None`` means absent.
    """

    @abstractmethod
    def connect(self) -> None:
        """
        Establish the connection.

        Raises:
            ConnectionFailedError: If the store is unreachable
        """

    def close(self) -> None:
        """Release connection resources."""

    @abstractmethod
    def get(self, path: str) -> Any:
        """Current value at a path, or None."""

    @abstractmethod
    def set(self, path: str, value: Any) -> None:
        """Replace the value at a path (None deletes)."""

    @abstractmethod
    def update(self, path: str, fields: Mapping[str, Any]) -> None:
        """Merge fields into the value at a path."""

    @abstractmethod
    def remove(self, path: str) -> None:
        """Delete a path and everything under it."""

    @abstractmethod
    def listen(self, path: str, callback: ValueCallback) -> ListenerHandle:
        """Register a live listener for the value at a path."""

    @abstractmethod
    def detach(self, handle: ListenerHandle) -> None:
        """Forget a listener (called by ``ListenerHandle.cancel``)."""

    def process_events(self, timeout: float = 0.0) -> int:
        """
        Deliver change notifications that arrived asynchronously.

        Backends that deliver synchronously have nothing to do.

        Returns:
            Number of notifications delivered
        """
        return 0


class MemoryBackend(RemoteBackend):
    """
    In-process tree with synchronous change delivery.

    Used when no database URL is configured, and in tests.

    Example:
        >>> backend = MemoryBackend({"attention": {"a1": {"title": "Call vet"}}})
        >>> backend.connect()
        >>> backend.get("attention/a1")["title"]
        'Call vet'
    """

    def __init__(self, initial: Mapping[str, Any] | None = None) -> None:
        self._root: dict[str, Any] = set_node({}, [], dict(initial or {}))
        self._listeners: list[ListenerHandle] = []
        self._lock = threading.RLock()
        self.connected = False

    def connect(self) -> None:
        self.connected = True

    def close(self) -> None:
        self.connected = False

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def listeners_at(self, path: str) -> list[ListenerHandle]:
        path = normalize_path(path)
        return [h for h in self._listeners if h.path == path]

    def get(self, path: str) -> Any:
        with self._lock:
            return get_node(self._root, split_path(path))

    def set(self, path: str, value: Any) -> None:
        with self._lock:
            self._root = set_node(self._root, split_path(path), value)
        self._notify(path)

    def update(self, path: str, fields: Mapping[str, Any]) -> None:
        with self._lock:
            self._root = update_node(self._root, split_path(path), fields)
        self._notify(path)

    def remove(self, path: str) -> None:
        self.set(path, None)

    def listen(self, path: str, callback: ValueCallback) -> ListenerHandle:
        handle = ListenerHandle(self, normalize_path(path), callback)
        self._listeners.append(handle)
        handle.deliver(self.get(handle.path))
        return handle

    def detach(self, handle: ListenerHandle) -> None:
        if handle in self._listeners:
            self._listeners.remove(handle)

    def _notify(self, changed_path: str) -> None:
        for handle in list(self._listeners):
            if handle.active and is_related(handle.path, changed_path):
                handle.deliver(self.get(handle.path))
