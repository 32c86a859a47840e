"""lessonchat - Author conversational lessons.

This package parses the lesson mini-language (speaker turns, callout
cards and freeform canvases, optionally followed by an explanation) into
an editable document and renders it back losslessly.

Key features:
- Parse lesson text into typed, immutable blocks with stable ids
- Render documents back to canonical text (parse/render round trip)
- Edit through a total mutation API with bounded undo/redo
- Reconcile externally changed text while keeping block identity
- Anchor annotations to ranges of a block's text

Example:
    >>> from lessonchat import ChatDocument, EditController
    >>> controller = EditController(ChatDocument.parse("Ann: Hi\\n\\nKaran: Hello"))
    >>> controller.insert_callout_at(1, "Always test edge cases")
    >>> controller.text
    'Ann: Hi\\n\\nKaran: Hello\\n\\nCALLOUT: [CALLOUT:🧠:Key Takeaway]: Always test edge cases'
"""

from lessonchat.annotations.locator import AnnotationLocator
from lessonchat.editing.controller import EditController
from lessonchat.editing.sync import SyncReconciler
from lessonchat.models.anchor import Anchor, TextSelection
from lessonchat.models.block import CalloutBlock, FreeformBlock, MessageBlock
from lessonchat.models.document import ChatDocument

__version__ = "0.1.0"

__all__ = [
    "Anchor",
    "AnnotationLocator",
    "CalloutBlock",
    "ChatDocument",
    "EditController",
    "FreeformBlock",
    "MessageBlock",
    "SyncReconciler",
    "TextSelection",
]
