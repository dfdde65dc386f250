"""
Remote sync client for the shared real-time tree.

Attention items and their sub-records live in a hierarchical store shared
by every device. This package provides path helpers, backends and the
:class:`SyncClient` with its deferred-readiness queue.
"""

from planner.core.remote.backend import (
    ConnectionFailedError,
    ListenerHandle,
    MemoryBackend,
    RemoteBackend,
    RemoteStoreError,
)
from planner.core.remote.client import (
    DONE_STATUS,
    Subscription,
    SyncClient,
    create_backend,
    get_sync_client,
    reset_sync_client,
)
from planner.core.remote.paths import (
    ATTENTION_PATH,
    BUSINESS_PATH,
    DOCUMENTS_PATH,
    LINKS_PATH,
    NOTES_PATH,
    PHOTOS_PATH,
    InvalidPathError,
    SubCollection,
    attention_path,
    business_tasks_path,
    join_path,
    normalize_path,
    sub_collection_path,
)
from planner.core.remote.push_ids import PushIdGenerator
from planner.core.remote.state import Connecting, ConnectionState, Disconnected, Ready

__all__ = [
    # Client
    "SyncClient",
    "Subscription",
    "DONE_STATUS",
    "get_sync_client",
    "reset_sync_client",
    "create_backend",
    # Backends
    "RemoteBackend",
    "MemoryBackend",
    "ListenerHandle",
    "RemoteStoreError",
    "ConnectionFailedError",
    # State
    "ConnectionState",
    "Disconnected",
    "Connecting",
    "Ready",
    # Paths
    "ATTENTION_PATH",
    "BUSINESS_PATH",
    "DOCUMENTS_PATH",
    "LINKS_PATH",
    "NOTES_PATH",
    "PHOTOS_PATH",
    "InvalidPathError",
    "SubCollection",
    "attention_path",
    "business_tasks_path",
    "join_path",
    "normalize_path",
    "sub_collection_path",
    "PushIdGenerator",
]
