"""Annotation locator: selections inside a block to persistent anchors.

The host reports a selection as plain ``(start, end, text)`` inside one
block's rendered content. The locator normalizes it and resolves the
owning block's index at call time. It never stores anchors and never
mutates the document.
"""

from typing import Callable, Optional, Union

from lessonchat.models.anchor import Anchor, TextSelection
from lessonchat.models.document import ChatDocument
from lessonchat.utils.logging import get_logger


logger = get_logger(__name__)

MIN_SELECTION_LENGTH = 2

DocumentSource = Union[ChatDocument, Callable[[], ChatDocument]]


class AnnotationLocator:
    """Builds anchors against the current state of a document.

    Args:
        source: A document, or a callable returning the live document
            (e.g. ``lambda: controller.document``)

    Example:
        >>> locator = AnnotationLocator(lambda: controller.document)
        >>> anchor = locator.locate(block.id, TextSelection(start=4, end=9, text="world"))
        >>> storage.save(anchor.model_dump())
    """

    def __init__(self, source: DocumentSource):
        self._source = source

    @property
    def document(self) -> ChatDocument:
        if isinstance(self._source, ChatDocument):
            return self._source
        return self._source()

    def locate(self, block_id: str, selection: TextSelection) -> Optional[Anchor]:
        """Create an anchor for a selection inside one block.

        Offsets given in reverse order are swapped and negative offsets are
        clamped to zero. Whitespace trimmed from the selected text is also
        trimmed from the offsets.

        Args:
            block_id: Id of the block the selection was made in
            selection: Host-reported selection

        Returns:
            Anchor, or None when the block is unknown or the selection is
            empty, whitespace-only or shorter than two characters
        """
        text = selection.text.strip()
        if len(text) < MIN_SELECTION_LENGTH:
            logger.debug("selection_rejected", block_id=block_id, length=len(text))
            return None

        index = self.document.index_of(block_id)
        if index < 0:
            logger.debug("selection_rejected", block_id=block_id, reason="unknown_block")
            return None

        start, end = sorted((max(0, selection.start), max(0, selection.end)))

        # Offsets must cover the trimmed text, not the whitespace around it
        raw = selection.text
        start += len(raw) - len(raw.lstrip())
        end = max(start, end - (len(raw) - len(raw.rstrip())))

        return Anchor(block_index=index, start=start, end=end, text=text)

    def annotate_block(self, block_id: str) -> Optional[Anchor]:
        """Anchor the whole content of a block."""
        block = self.document.get(block_id)
        if block is None:
            return None
        return self.locate(
            block_id,
            TextSelection(start=0, end=len(block.content), text=block.content),
        )

    def is_stale(self, anchor: Anchor) -> bool:
        """Check whether an anchor no longer matches its block.

        Anchors are never rebased. This only reports whether the anchored
        text is still found at the anchored offsets, so the host can flag
        the annotation.

        Returns:
            True if the block is gone or its content at the offsets differs
        """
        block = self.document.block_at(anchor.block_index)
        if block is None:
            return True
        stale = block.content[anchor.start:anchor.end].strip() != anchor.text
        if stale:
            logger.warning("anchor_stale", block_index=anchor.block_index)
        return stale
