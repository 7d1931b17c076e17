"""Keep a plain-Python replica of a CRDT document current.

Remote changes arrive as Automerge patch events.  Each event is translated
to a canonical edit and applied to the replica in order.  The replica is
owned by the mirror; callers read ``mirror.root``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from treepatch.core.apply import BLOCK_MARKER, apply
from treepatch.core.config import TreepatchConfig
from treepatch.core.edits import Edit
from treepatch.sync.translate import SnapshotLookup, from_automerge

logger = logging.getLogger(__name__)


class DocumentMirror:
    """Plain-Python replica of a document, fed by Automerge patch events."""

    def __init__(
        self,
        root: dict | list | None = None,
        *,
        increment_policy: str = "error",
        block_marker: str = BLOCK_MARKER,
    ) -> None:
        self.root = {} if root is None else root
        self.increment_policy = increment_policy
        self.block_marker = block_marker
        self.applied = 0

    @classmethod
    def from_config(cls, config: TreepatchConfig, root: dict | list | None = None) -> DocumentMirror:
        return cls(
            root,
            increment_policy=config.get("increment_policy", "error"),
            block_marker=config.get("block_marker", BLOCK_MARKER),
        )

    def apply_edit(self, *edit: object) -> None:
        """Apply a canonical edit to the replica."""
        apply(self.root, *edit, block_marker=self.block_marker)
        if edit:
            self.applied += 1

    def apply_event(self, event: object, lookup: SnapshotLookup | None = None) -> Edit:
        """Translate and apply one patch event.  Returns the edit applied.

        Errors propagate, and the replica keeps whatever was applied before
        the failing event.
        """
        edit = from_automerge(event, lookup, increment_policy=self.increment_policy)
        if edit:
            self.apply_edit(*edit)
        return edit

    def apply_events(self, events: Iterable[object], lookup: SnapshotLookup | None = None) -> int:
        """Translate and apply a batch.  Returns how many edits changed the replica."""
        count = 0
        for event in events:
            if self.apply_event(event, lookup):
                count += 1
        logger.debug("mirror applied %d edit(s), %d total", count, self.applied)
        return count
