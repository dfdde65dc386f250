"""
Read-side HTTP helpers.

Tracker snapshots, the idea bootstrap snapshot and one-time reads against
the remote store all go through ``send``/``fetch_json``, which retry
transient failures with exponential backoff. Writes never do: a failed
write is reported once and dropped by the caller.

    >>> from planner.core.http import fetch_json
    >>> cards = fetch_json("https://example.com/data/cards.json")
"""

import functools
import json
import logging
import random
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

R = TypeVar("R")

DEFAULT_TIMEOUT = 10.0


class Backoff(BaseModel):
    """
    How many times to retry and how long to wait in between.

    The wait before retry ``n`` (0-indexed) is ``first_delay * factor**n``,
    shifted by up to ``spread`` of itself in either direction.
    """

    model_config = ConfigDict(frozen=True)

    retries: int = Field(default=2, ge=0)
    first_delay: float = Field(default=0.5, gt=0)
    factor: float = Field(default=2.0, ge=1.0)
    spread: float = Field(default=0.2, ge=0.0, le=1.0)

    def delay(self, retry: int) -> float:
        wait = self.first_delay * self.factor**retry
        if self.spread:
            wait += random.uniform(-wait * self.spread, wait * self.spread)
        return max(0.0, wait)


def is_transient(error: BaseException) -> bool:
    """True for failures worth another attempt: 5xx, timeouts, dropped connections."""
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code >= 500
    return isinstance(error, httpx.HTTPError)


def retrying(backoff: Backoff | None = None) -> Callable[[Callable[..., R]], Callable[..., R]]:
    """Decorate ``func`` so transient httpx failures are retried per ``backoff``."""
    policy = backoff or Backoff()

    def decorate(func: Callable[..., R]) -> Callable[..., R]:
        name = getattr(func, "__name__", repr(func))

        @functools.wraps(func)
        def call(*args: Any, **kwargs: Any) -> R:
            retry = 0
            while True:
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    if not is_transient(e):
                        raise
                    if retry >= policy.retries:
                        logger.warning("%s: giving up after %d retries: %s", name, retry, e)
                        raise
                    wait = policy.delay(retry)
                    retry += 1
                    logger.info(
                        "%s: retry %d/%d in %.2fs (%s)", name, retry, policy.retries, wait, e
                    )
                    time.sleep(wait)

        return call

    return decorate


def send(
    method: str,
    url: str,
    *,
    client: httpx.Client | None = None,
    backoff: Backoff | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    **kwargs: Any,
) -> httpx.Response:
    """
    Issue one request, retrying transient failures.

    ``client`` lets callers share a connection pool (and lets tests inject a
    ``MockTransport``). Non-2xx responses raise ``httpx.HTTPStatusError``.
    """

    @retrying(backoff)
    def attempt() -> httpx.Response:
        if client is None:
            response = httpx.request(method, url, timeout=timeout, **kwargs)
        else:
            response = client.request(method, url, timeout=timeout, **kwargs)
        response.raise_for_status()
        return response

    return attempt()


def fetch_json(
    url: str,
    *,
    client: httpx.Client | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    backoff: Backoff | None = None,
) -> Any:
    """GET ``url`` and decode the body. Bad JSON raises ``ValueError``."""
    return send("GET", url, client=client, backoff=backoff, timeout=timeout).json()


def read_json_source(
    source: str,
    *,
    client: httpx.Client | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    backoff: Backoff | None = None,
) -> Any:
    """
    Read JSON from an http(s) URL, a ``file://`` URL or a plain path.

    Raises ``httpx.HTTPError`` for failed fetches, ``OSError`` for unreadable
    files and ``ValueError`` for content that is not JSON.
    """
    if source.startswith(("http://", "https://")):
        return fetch_json(source, client=client, timeout=timeout, backoff=backoff)
    path = Path(source.removeprefix("file://")).expanduser()
    return json.loads(path.read_text(encoding="utf-8"))


__all__ = [
    "Backoff",
    "is_transient",
    "retrying",
    "send",
    "fetch_json",
    "read_json_source",
]
