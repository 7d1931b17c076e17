"""Read Automerge documents as plain trees and snapshot lookups.

Optional module, requires ``pip install treepatch[sync]``.
"""

from __future__ import annotations

from automerge import Document, ImmutableString

from treepatch.sync.snapshots import lookup_from_tree
from treepatch.sync.translate import SnapshotLookup


def document_to_tree(doc: Document) -> dict:
    """Return a plain-Python copy of an Automerge document.

    ``ImmutableString`` scalars become ``str``; collaborative text is
    already ``str`` in ``to_py()`` output.
    """
    return _plain(doc.to_py())  # type: ignore[return-value]


def lookup_from_document(doc: Document) -> SnapshotLookup:
    """Build a lookup over the current state of an Automerge document.

    The state is captured once, when the lookup is built, so build it
    after the change whose patches are being translated.
    """
    return lookup_from_tree(document_to_tree(doc))


def _plain(value: object) -> object:
    if isinstance(value, ImmutableString):
        return str(value)
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value
