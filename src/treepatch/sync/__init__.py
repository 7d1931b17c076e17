"""Automerge patch translation and document mirroring.

``treepatch.sync.documents`` needs the optional ``automerge`` package
(``pip install treepatch[sync]``); the translator and mirror do not.
"""

from __future__ import annotations

from treepatch.sync.mirror import DocumentMirror
from treepatch.sync.translate import from_automerge, translate_all

__all__ = [
    "DocumentMirror",
    "from_automerge",
    "translate_all",
]
