"""
Tracker snapshot loading.

Each tracker publishes ``{"cards": [...]}`` (older ones publish a bare
list). A tracker that cannot be fetched or parsed contributes no cards; it
never aborts the load of the others.
"""

import logging
from collections.abc import Iterable
from typing import Any

import httpx
from pydantic import ValidationError

from planner.core.board.models import TrackerCard, TrackerSnapshot
from planner.core.config.models import HttpConfig, TrackerSource
from planner.core.http import read_json_source

logger = logging.getLogger(__name__)


def parse_cards(payload: Any, source_id: str = "") -> list[TrackerCard]:
    """
    Cards of a snapshot payload.

    Malformed cards are skipped with a warning.

    Raises:
        ValueError: If the payload has no card list at all
    """
    if isinstance(payload, dict):
        raw_cards = payload.get("cards", [])
    elif isinstance(payload, list):
        raw_cards = payload
    else:
        raise ValueError(f"expected an object or list, got {type(payload).__name__}")
    if not isinstance(raw_cards, list):
        raise ValueError("'cards' is not a list")

    cards: list[TrackerCard] = []
    for index, raw in enumerate(raw_cards):
        try:
            cards.append(TrackerCard.model_validate(raw))
        except ValidationError as e:
            logger.warning("Skipping malformed card #%d from %s: %s", index, source_id or "?", e)
    return cards


def load_tracker(
    source: TrackerSource,
    *,
    client: httpx.Client | None = None,
    http_config: HttpConfig | None = None,
) -> TrackerSnapshot:
    """Fetch one tracker snapshot, degrading to no cards on any failure."""
    if not source.data_url:
        return TrackerSnapshot(source=source)

    http_config = http_config or HttpConfig()
    try:
        payload = read_json_source(
            source.data_url,
            client=client,
            timeout=http_config.timeout,
            backoff=http_config.backoff,
        )
        cards = parse_cards(payload, source.id)
    except (httpx.HTTPError, OSError, ValueError) as e:
        logger.warning("Could not load tracker %s: %s", source.id, e)
        return TrackerSnapshot(source=source, error=str(e))

    logger.debug("Loaded %d card(s) from %s", len(cards), source.id)
    return TrackerSnapshot(source=source, cards=cards)


def load_trackers(
    sources: Iterable[TrackerSource],
    *,
    client: httpx.Client | None = None,
    http_config: HttpConfig | None = None,
) -> list[TrackerSnapshot]:
    """Load every tracker, in source order."""
    return [load_tracker(source, client=client, http_config=http_config) for source in sources]
