"""
Connection state of the remote sync client.

The client is always in exactly one of three states::

    Disconnected --connect()--> Connecting --ok--> Ready(backend)
         ^                          |
         +-------- failure ---------+

Operations requested in ``Disconnected`` or ``Connecting`` wait in the
client's pending queue, which is drained once, in submission order, on the
transition to ``Ready``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from planner.core.remote.backend import RemoteBackend


@dataclass(frozen=True)
class Disconnected:
    """No connection attempt in progress."""

    error: str | None = None


@dataclass(frozen=True)
class Connecting:
    """A connection attempt is in progress."""


@dataclass(frozen=True)
class Ready:
    """Connected; operations run immediately against ``backend``."""

    backend: RemoteBackend


ConnectionState = Union[Disconnected, Connecting, Ready]
