"""
Realtime Database backend over the REST and streaming APIs.

REST:
    GET    {db}/{path}.json    one-time read (``null`` when absent)
    PUT    {db}/{path}.json    replace
    PATCH  {db}/{path}.json    merge (multi-path keys allowed)
    DELETE {db}/{path}.json    remove subtree

Streaming:
    GET {db}/{path}.json with ``Accept: text/event-stream`` yields
    server-sent events. ``put`` replaces the data at a path relative to the
    listened location, ``patch`` merges into it, ``keep-alive`` is noise and
    ``cancel``/``auth_revoked`` end the stream.

Each live listener runs its stream on a daemon thread that applies events
to a private mirror of the listened subtree and posts the resulting value
to an inbox. :meth:`FirebaseBackend.process_events` drains the inbox on the
caller's thread, so listener callbacks never run concurrently with the
rest of the planner.
"""

from __future__ import annotations

import copy
import json
import logging
import queue
import threading
from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import Any

import httpx

from planner.core.http import Backoff, send
from planner.core.remote.backend import (
    ConnectionFailedError,
    ListenerHandle,
    RemoteBackend,
    RemoteStoreError,
    ValueCallback,
)
from planner.core.remote.paths import normalize_path, split_path
from planner.core.remote.tree import set_node, update_node

logger = logging.getLogger(__name__)


def parse_sse(lines: Iterable[str]) -> Iterator[tuple[str, str]]:
    """
    Parse server-sent event lines into ``(event, data)`` pairs.

    Multi-line ``data:`` fields are joined with newlines; comment lines
    (starting with ``:``) are ignored.
    """
    event = "message"
    data: list[str] = []
    for raw in lines:
        line = raw.rstrip("\r")
        if not line:
            if data:
                yield event, "\n".join(data)
            event, data = "message", []
            continue
        if line.startswith(":"):
            continue
        field, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]
        if field == "event":
            event = value
        elif field == "data":
            data.append(value)
    if data:
        yield event, "\n".join(data)


class StreamMirror:
    """
    Local copy of a listened subtree, maintained from stream events.

    The value lives under a single ``"v"`` key so that a ``put`` at the
    listened root can replace it like any other node.
    """

    def __init__(self) -> None:
        self._container: dict[str, Any] = {}

    @property
    def value(self) -> Any:
        return copy.deepcopy(self._container.get("v"))

    def apply(self, event: str, payload: Mapping[str, Any]) -> bool:
        """
        Apply a ``put`` or ``patch`` payload.

        Returns:
            True if the event carried data
        """
        segments = ["v", *split_path(str(payload.get("path", "/")))]
        data = payload.get("data")
        if event == "put":
            self._container = set_node(self._container, segments, data)
            return True
        if event == "patch" and isinstance(data, Mapping):
            self._container = update_node(self._container, segments, data)
            return True
        return False


class _StreamListener(ListenerHandle):
    """A listener whose stream runs on its own daemon thread."""

    def __init__(self, backend: FirebaseBackend, path: str, callback: ValueCallback) -> None:
        super().__init__(backend, path, callback)
        self.stop_event = threading.Event()
        self.thread: threading.Thread | None = None


class FirebaseBackend(RemoteBackend):
    """
    Backend for a Firebase Realtime Database.

    Example:
        >>> backend = FirebaseBackend("https://demo-default-rtdb.firebasedatabase.app")
        >>> backend.connect()
        >>> backend.get("attention")
    """

    def __init__(
        self,
        database_url: str,
        auth_token: str | None = None,
        *,
        timeout: float = 10.0,
        client: httpx.Client | None = None,
        max_retries: int = 2,
    ) -> None:
        self.database_url = database_url.rstrip("/")
        self.auth_token = auth_token
        self.timeout = timeout
        self.max_retries = max_retries
        self._client = client
        self._owns_client = client is None
        self._inbox: queue.Queue[tuple[_StreamListener, Any]] = queue.Queue()
        self._listeners: list[_StreamListener] = []
        self._backoff = Backoff(retries=max_retries)
        self._reconnect = Backoff(retries=0, first_delay=1.0)

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(timeout=self.timeout)
        return self._client

    def url_for(self, path: str) -> str:
        path = normalize_path(path)
        return f"{self.database_url}/{path}.json" if path else f"{self.database_url}/.json"

    def _params(self, **extra: str) -> dict[str, str]:
        params = dict(extra)
        if self.auth_token:
            params["auth"] = self.auth_token
        return params

    def _write(self, method: str, path: str, body: Any = None) -> None:
        kwargs: dict[str, Any] = {"params": self._params(print="silent")}
        if body is not None:
            kwargs["content"] = json.dumps(body)
            kwargs["headers"] = {"Content-Type": "application/json"}
        try:
            response = self.client.request(method, self.url_for(path), **kwargs)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise RemoteStoreError(f"{method} {path} failed: {e}", path=path) from e

    # ------------------------------------------------------------------
    # RemoteBackend
    # ------------------------------------------------------------------

    def connect(self) -> None:
        try:
            send(
                "GET",
                self.url_for(""),
                client=self.client,
                timeout=self.timeout,
                backoff=self._backoff,
                params=self._params(shallow="true"),
            )
        except httpx.HTTPError as e:
            raise ConnectionFailedError(f"Cannot reach {self.database_url}: {e}") from e
        logger.info("Connected to realtime database %s", self.database_url)

    def close(self) -> None:
        for handle in list(self._listeners):
            handle.cancel()
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None

    def get(self, path: str) -> Any:
        try:
            response = send(
                "GET",
                self.url_for(path),
                client=self.client,
                timeout=self.timeout,
                backoff=self._backoff,
                params=self._params(),
            )
            return response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise RemoteStoreError(f"GET {path} failed: {e}", path=path) from e

    def set(self, path: str, value: Any) -> None:
        if value is None:
            self.remove(path)
            return
        self._write("PUT", path, value)

    def update(self, path: str, fields: Mapping[str, Any]) -> None:
        self._write("PATCH", path, dict(fields))

    def remove(self, path: str) -> None:
        self._write("DELETE", path)

    def listen(self, path: str, callback: ValueCallback) -> ListenerHandle:
        handle = _StreamListener(self, normalize_path(path), callback)
        handle.thread = threading.Thread(
            target=self._run_stream,
            args=(handle,),
            name=f"rtdb-stream:{handle.path or '/'}",
            daemon=True,
        )
        self._listeners.append(handle)
        handle.thread.start()
        return handle

    def detach(self, handle: ListenerHandle) -> None:
        if isinstance(handle, _StreamListener):
            handle.stop_event.set()
        if handle in self._listeners:
            self._listeners.remove(handle)  # type: ignore[arg-type]

    def process_events(self, timeout: float = 0.0) -> int:
        delivered = 0
        block = timeout > 0
        while True:
            try:
                handle, value = self._inbox.get(block=block, timeout=timeout if block else None)
            except queue.Empty:
                return delivered
            block = False
            if handle.active:
                handle.deliver(value)
                delivered += 1

    # ------------------------------------------------------------------
    # Streaming
    # ------------------------------------------------------------------

    def _run_stream(self, handle: _StreamListener) -> None:
        attempt = 0
        while not handle.stop_event.is_set():
            try:
                self._consume_stream(handle, self._post_to_inbox)
                attempt = 0
            except (httpx.HTTPError, RemoteStoreError) as e:
                logger.warning("Stream for %s dropped: %s", handle.path or "/", e)
                attempt += 1
            if handle.stop_event.wait(self._reconnect.delay(min(attempt, 5))):
                return

    def _post_to_inbox(self, handle: _StreamListener, value: Any) -> None:
        self._inbox.put((handle, value))

    def _consume_stream(
        self,
        handle: _StreamListener,
        emit: Callable[[_StreamListener, Any], None],
    ) -> None:
        mirror = StreamMirror()
        headers = {"Accept": "text/event-stream"}
        timeout = httpx.Timeout(self.timeout, read=None)
        with self.client.stream(
            "GET", self.url_for(handle.path), headers=headers, params=self._params(), timeout=timeout
        ) as response:
            response.raise_for_status()
            for event, data in parse_sse(response.iter_lines()):
                if handle.stop_event.is_set():
                    return
                if event in ("cancel", "auth_revoked"):
                    raise RemoteStoreError(f"stream {event}: {data}", path=handle.path)
                if event not in ("put", "patch"):
                    continue
                try:
                    payload = json.loads(data)
                except ValueError:
                    logger.warning("Ignoring malformed stream event on %s", handle.path or "/")
                    continue
                if isinstance(payload, Mapping) and mirror.apply(event, payload):
                    emit(handle, mirror.value)
