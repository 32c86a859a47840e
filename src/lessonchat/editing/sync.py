"""Reconciliation of externally supplied lesson text with the live document.

When the host re-assigns the text a document is bound to, the text is
re-parsed and old block ids are adopted position by position wherever the
block at that index is structurally unchanged. Untouched blocks keep their
identity, so consumers keyed on ids do not remount them.

Reconciliation is positional, not content-addressed: inserting a block at
position 0 gives every later block a new id even if its content did not
change.
"""

from typing import Iterable, Optional

from lessonchat.models.document import ChatDocument
from lessonchat.utils.logging import get_logger


logger = get_logger(__name__)


class SyncReconciler:
    """Merges external text snapshots into a document.

    Also guards against feedback loops: text the editor itself emitted is
    remembered with ``mark_emitted`` and ignored when it comes back.

    Example:
        >>> reconciler = SyncReconciler()
        >>> reconciler.mark_emitted(document.render())
        >>> if not reconciler.is_echo(incoming):
        ...     document = reconciler.reconcile(document, incoming)
    """

    def __init__(self, known_speakers: Optional[Iterable[str]] = None):
        self.known_speakers = list(known_speakers) if known_speakers is not None else None
        self.last_emitted: Optional[str] = None

    def mark_emitted(self, text: str) -> None:
        """Remember text produced by the editor itself."""
        self.last_emitted = text

    def is_echo(self, text: str) -> bool:
        """Check whether incoming text is the editor's own last output."""
        return self.last_emitted is not None and text == self.last_emitted

    def reconcile(self, document: ChatDocument, text: str) -> ChatDocument:
        """Produce a document reflecting ``text`` while preserving ids.

        Args:
            document: Current live document
            text: Externally supplied lesson text

        Returns:
            ``document`` itself when the text is structurally identical,
            otherwise a new document whose blocks adopt the old id at every
            index where the old and new blocks are structurally equal
        """
        parsed = ChatDocument.parse(text, known_speakers=self.known_speakers)

        if parsed.structurally_equals(document):
            logger.debug("reconcile_unchanged", blocks=len(document))
            return document

        old_blocks = document.blocks
        merged = []
        adopted = 0
        for index, block in enumerate(parsed.blocks):
            if index < len(old_blocks) and old_blocks[index].structurally_equals(block):
                merged.append(old_blocks[index])
                adopted += 1
            else:
                merged.append(block)

        logger.info(
            "reconciled",
            blocks=len(merged),
            adopted_ids=adopted,
            new_ids=len(merged) - adopted,
        )
        return ChatDocument(blocks=tuple(merged), explanation=parsed.explanation, source_text=text)
