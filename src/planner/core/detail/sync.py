"""
Live sub-collections for the one attention item currently in focus.

State machine::

    closed --open(X)--> open(X) --close()--> closed
                           |
                       open(Y): close() runs first, then open(Y)

Opening attaches four subscriptions (notes, documents, photos, links) for
the item. Closing cancels all four *before* the active id is cleared, so a
stale view never receives updates. Callbacks that still arrive for an item
that is no longer active are discarded.

Links are written as two independent records, one under each endpoint.
Deleting a link removes only the record under the open item.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from functools import partial
from typing import Any

from planner.core.attention.models import AttentionItem
from planner.core.attention.service import AttentionService
from planner.core.detail.models import (
    DEFAULT_LINK_LABEL,
    RECORD_TYPES,
    Document,
    Link,
    Note,
    Photo,
)
from planner.core.remote.client import Subscription, SyncClient
from planner.core.remote.paths import (
    ATTENTION_PATH,
    SubCollection,
    attention_path,
    join_path,
    sub_collection_path,
)

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[SubCollection], None]


class ItemDetailSync:
    """
    Detail view model for one attention item at a time.

    Example:
        >>> detail = ItemDetailSync(client, author="Andrew")
        >>> detail.open("-NxA", {"title": "Order timber"})
        >>> detail.add_note("Called the yard, delivery Tuesday")
        >>> detail.add_link("-NxB", label="blocks")
        >>> detail.close()
    """

    def __init__(
        self,
        client: SyncClient,
        author: str = "me",
        on_change: ChangeCallback | None = None,
    ) -> None:
        self.client = client
        self.author = author
        self.on_change = on_change
        self.attention = AttentionService(client)
        self.active_id: str | None = None
        self.active_item: AttentionItem | None = None
        self.notes: list[Note] = []
        self.documents: list[Document] = []
        self.photos: list[Photo] = []
        self.links: list[Link] = []
        # titles seen in link target lookups, used for the far side of new links
        self.known_titles: dict[str, str] = {}
        self._subscriptions: dict[SubCollection, Subscription] = {}
        # bumped on every open and close; a pending navigation only applies
        # if nothing changed focus since it was requested
        self._focus = 0

    @property
    def is_open(self) -> bool:
        return self.active_id is not None

    @property
    def subscriptions(self) -> list[Subscription]:
        return list(self._subscriptions.values())

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self, item_id: str, item: AttentionItem | Mapping[str, Any] | None = None) -> None:
        """Focus an item, closing the currently open one first."""
        if self.is_open:
            self.close()
        self._focus += 1

        if isinstance(item, Mapping):
            item = AttentionItem.from_record(item_id, item)
        self.active_id = item_id
        self.active_item = item
        if item is not None and item.title:
            self.known_titles[item_id] = item.title

        for kind in SubCollection:
            self._subscriptions[kind] = self.client.subscribe(
                sub_collection_path(kind, item_id), partial(self._on_snapshot, kind, item_id)
            )
        logger.debug("Opened item %s", item_id)

    def close(self) -> None:
        """Detach all four listeners, then clear the active item."""
        self._focus += 1
        if not self.is_open:
            return
        for subscription in self._subscriptions.values():
            subscription.cancel()
        self._subscriptions.clear()

        logger.debug("Closed item %s", self.active_id)
        self.active_id = None
        self.active_item = None
        self.notes, self.documents, self.photos, self.links = [], [], [], []

    def _on_snapshot(self, kind: SubCollection, item_id: str, snapshot: Any) -> None:
        if item_id != self.active_id:
            logger.debug("Discarding late %s update for %s", kind.value, item_id)
            return
        records = RECORD_TYPES[kind].newest_first(snapshot)
        setattr(self, _ATTRIBUTES[kind], records)
        if self.on_change is not None:
            self.on_change(kind)

    def _add(self, kind: SubCollection, record: dict[str, Any]) -> str | None:
        if self.active_id is None:
            return None
        return self.client.add(sub_collection_path(kind, self.active_id), record)

    # ------------------------------------------------------------------
    # Adding
    # ------------------------------------------------------------------

    def add_note(self, text: str) -> str | None:
        text = text.strip()
        if not text:
            return None
        return self._add(SubCollection.NOTES, {"text": text, "author": self.author})

    def add_doc(self, url: str, title: str = "") -> str | None:
        """Attach a document; the title defaults to the URL."""
        url = url.strip()
        if not url:
            return None
        return self._add(SubCollection.DOCUMENTS, {"title": title.strip() or url, "url": url})

    def add_photo(self, url: str, caption: str = "") -> str | None:
        url = url.strip()
        if not url:
            return None
        return self._add(SubCollection.PHOTOS, {"url": url, "caption": caption.strip()})

    def add_link(
        self,
        target_id: str,
        label: str = "",
        target_title: str | None = None,
    ) -> tuple[str, str] | None:
        """
        Link the open item and ``target_id`` in both directions.

        Self-links and calls with no open item are ignored.

        Returns:
            Keys of the record under the open item and of the mirrored
            record under the target, or None if nothing was written
        """
        own_id = self.active_id
        if own_id is None or not target_id or target_id == own_id:
            return None

        label = label.strip() or DEFAULT_LINK_LABEL
        target_title = target_title or self.known_titles.get(target_id) or target_id
        own_title = self.active_item.title if self.active_item and self.active_item.title else None

        forward = self.client.add(
            sub_collection_path(SubCollection.LINKS, own_id),
            {"targetId": target_id, "targetTitle": target_title, "label": label},
        )
        reverse = self.client.add(
            sub_collection_path(SubCollection.LINKS, target_id),
            {"targetId": own_id, "targetTitle": own_title or own_id, "label": label},
        )
        return forward, reverse

    # ------------------------------------------------------------------
    # Deleting (own side only)
    # ------------------------------------------------------------------

    def _delete(self, kind: SubCollection, record_id: str) -> None:
        if self.active_id is None or not record_id:
            return
        self.client.remove(join_path(sub_collection_path(kind, self.active_id), record_id))

    def delete_note(self, note_id: str) -> None:
        self._delete(SubCollection.NOTES, note_id)

    def delete_doc(self, doc_id: str) -> None:
        self._delete(SubCollection.DOCUMENTS, doc_id)

    def delete_photo(self, photo_id: str) -> None:
        self._delete(SubCollection.PHOTOS, photo_id)

    def delete_link(self, link_id: str) -> None:
        """Remove the link record under the open item; the far side is kept."""
        self._delete(SubCollection.LINKS, link_id)

    # ------------------------------------------------------------------
    # Navigation and actions
    # ------------------------------------------------------------------

    def navigate_to_link(self, target_id: str) -> None:
        """
        Close the open item and open ``target_id`` once it has been read.

        A target that no longer exists leaves the view closed, and so does
        an ``open`` or ``close`` made before the read completes.
        """
        self.close()
        requested = self._focus

        def deliver(value: Any) -> None:
            if requested != self._focus:
                logger.debug("Dropping navigation to %s: focus changed", target_id)
                return
            if not value:
                logger.info("Linked item %s no longer exists", target_id)
                return
            self.open(target_id, value)

        self.client.get(attention_path(target_id), deliver)

    def link_targets(self, callback: Callable[[list[tuple[str, str]]], None]) -> None:
        """
        Items the open item could link to, as ``(id, display_title)`` pairs.

        Titles seen here are remembered for :meth:`add_link`.
        """
        exclude = self.active_id

        def deliver(snapshot: Any) -> None:
            targets = []
            for item in AttentionItem.list_from_snapshot(snapshot):
                if item.id == exclude:
                    continue
                if item.title:
                    self.known_titles[item.id] = item.title
                targets.append((item.id, item.title or item.id))
            callback(targets)

        self.client.get(ATTENTION_PATH, deliver)

    def mark_done(self) -> None:
        if self.active_id is None:
            return
        self.attention.complete(self.active_id)
        self.close()

    def dismiss(self) -> None:
        if self.active_id is None:
            return
        self.attention.dismiss(self.active_id)
        self.close()


_ATTRIBUTES = {
    SubCollection.NOTES: "notes",
    SubCollection.DOCUMENTS: "documents",
    SubCollection.PHOTOS: "photos",
    SubCollection.LINKS: "links",
}
