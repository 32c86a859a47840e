"""Edit controller: the mutation API for a lesson document.

The controller owns the live ChatDocument for an editing session. Every
operation is synchronous and total: out-of-range indices are clamped and
unknown ids are no-ops, so nothing here raises for bad input.

Each successful mutation:
1. records the previous block sequence in the undo history (redo cleared)
2. re-renders the document to canonical text
3. notifies subscribers with that text
"""

from typing import Any, Callable, Literal, Optional

from lessonchat.editing.history import EditHistory
from lessonchat.editing.sync import SyncReconciler
from lessonchat.models.block import (
    CALLOUT_MARKER,
    Block,
    BlockKind,
    BlockPatch,
    CalloutBlock,
    FreeformBlock,
    MessageBlock,
)
from lessonchat.models.config import EditorConfig
from lessonchat.models.document import ChatDocument
from lessonchat.utils.ids import generate_block_id
from lessonchat.utils.logging import get_logger


logger = get_logger(__name__)

ChangeListener = Callable[[str], None]
Direction = Literal["up", "down"]


class EditController:
    """Mutation API plus bounded undo/redo over one document.

    Example:
        >>> controller = EditController(ChatDocument.parse("Ann: Hi"))
        >>> controller.subscribe(lambda text: save(text))
        >>> block = controller.insert_message_at(-1, "Welcome!")
        >>> controller.undo()
    """

    def __init__(
        self,
        document: Optional[ChatDocument] = None,
        config: Optional[EditorConfig] = None,
        on_change: Optional[ChangeListener] = None,
    ):
        self.config = config or EditorConfig()
        self._document = document if document is not None else ChatDocument()
        self._history = EditHistory(limit=self.config.history_limit)
        self._reconciler = SyncReconciler()
        self._listeners: list[ChangeListener] = []
        self._speaker_index = 0

        if on_change is not None:
            self._listeners.append(on_change)

        self._text = self._document.render()
        self._reconciler.mark_emitted(self._text)

    @classmethod
    def from_text(cls, text: str, config: Optional[EditorConfig] = None, **kwargs: Any) -> "EditController":
        """Create a controller for freshly parsed lesson text."""
        return cls(ChatDocument.parse(text), config=config, **kwargs)

    # Read access

    @property
    def document(self) -> ChatDocument:
        return self._document

    @property
    def blocks(self) -> tuple[Block, ...]:
        return self._document.blocks

    @property
    def text(self) -> str:
        """Current canonical serialized text."""
        return self._text

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo

    @property
    def can_redo(self) -> bool:
        return self._history.can_redo

    @property
    def history(self) -> EditHistory:
        return self._history

    @property
    def current_speaker(self) -> str:
        """Speaker used for the next inserted message."""
        speakers = (self.config.mentor_name, self.config.course_name)
        return speakers[self._speaker_index]

    def toggle_speaker(self) -> str:
        """Alternate between the mentor and course speakers."""
        self._speaker_index = 1 - self._speaker_index
        return self.current_speaker

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """Register a change listener.

        Args:
            listener: Called with the new canonical text after every change

        Returns:
            Callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # Internal plumbing

    def _commit(self, blocks: tuple[Block, ...], operation: str, **context: Any) -> None:
        """Record history, install new blocks and notify."""
        self._history.record(self._document.blocks)
        self._document = self._document.with_blocks(blocks)
        logger.info(operation, blocks=len(blocks), undo_depth=self._history.undo_depth, **context)
        self._emit()

    def _emit(self) -> None:
        self._text = self._document.render()
        self._reconciler.mark_emitted(self._text)
        for listener in list(self._listeners):
            listener(self._text)

    def _unique(self, block: Block) -> Block:
        # Inserted blocks must not reuse an id already in the document
        if self._document.index_of(block.id) >= 0:
            return block.model_copy(update={"id": generate_block_id()})
        return block

    # Mutations

    def insert_at(self, after_index: int, block: Block) -> Block:
        """Insert a block after ``after_index``.

        The insertion point ``after_index + 1`` is clamped into
        ``[0, len(document)]``, so ``-1`` inserts at the top and any index
        at or past the end appends.

        Args:
            after_index: Index of the block to insert after (-1 for top)
            block: Block to insert (re-id'd if its id is already taken)

        Returns:
            The inserted block
        """
        block = self._unique(block)
        blocks = list(self._document.blocks)
        position = max(0, min(len(blocks), after_index + 1))
        blocks.insert(position, block)
        self._commit(tuple(blocks), "block_inserted", block_id=block.id, kind=block.kind, index=position)
        return block

    def insert_message_at(self, after_index: int, content: Optional[str] = None) -> Block:
        """Insert a message from the current speaker, then alternate speakers."""
        block = MessageBlock(
            speaker=self.current_speaker,
            content=content if content is not None else self.config.new_message_text,
        )
        inserted = self.insert_at(after_index, block)
        self.toggle_speaker()
        return inserted

    def insert_callout_at(self, after_index: int, content: Optional[str] = None) -> Block:
        """Insert a callout with the configured default title and icon."""
        block = CalloutBlock(
            speaker=CALLOUT_MARKER,
            content=content if content is not None else self.config.new_callout_text,
            callout_title=self.config.default_callout_title,
            callout_icon=self.config.default_callout_icon,
        )
        return self.insert_at(after_index, block)

    def insert_freeform_at(self, after_index: int) -> Block:
        """Insert an empty, not yet authored canvas."""
        return self.insert_at(after_index, FreeformBlock())

    def append_message(self, content: str) -> Optional[Block]:
        """Append a message from the current speaker.

        Blank input is ignored.

        Returns:
            The appended block, or None if ``content`` was blank
        """
        if not content.strip():
            return None
        return self.insert_message_at(len(self._document), content.strip())

    def edit_block(self, block_id: str, **changes: Any) -> bool:
        """Merge changes into the block with ``block_id``.

        Accepted keys are ``content``, ``callout_title``, ``callout_icon``
        and ``freeform_payload``; keys the block's kind does not have are
        ignored.

        Returns:
            True if the block changed, False for unknown ids or no-op edits
        """
        index = self._document.index_of(block_id)
        if index < 0:
            return False

        current = self._document.blocks[index]
        updated = BlockPatch(**changes).apply_to(current)
        if updated == current:
            return False

        blocks = list(self._document.blocks)
        blocks[index] = updated
        self._commit(tuple(blocks), "block_edited", block_id=block_id, fields=sorted(changes))
        return True

    def delete_block(self, block_id: str) -> bool:
        """Remove the block with ``block_id``. No-op for unknown ids."""
        index = self._document.index_of(block_id)
        if index < 0:
            return False

        blocks = self._document.blocks[:index] + self._document.blocks[index + 1:]
        self._commit(blocks, "block_deleted", block_id=block_id, index=index)
        return True

    def move_block(self, block_id: str, direction: Direction) -> bool:
        """Swap a block with its neighbour. No-op at either end."""
        index = self._document.index_of(block_id)
        if index < 0:
            return False

        swap = index - 1 if direction == "up" else index + 1
        if swap < 0 or swap >= len(self._document):
            return False

        blocks = list(self._document.blocks)
        blocks[index], blocks[swap] = blocks[swap], blocks[index]
        self._commit(tuple(blocks), "block_moved", block_id=block_id, direction=direction)
        return True

    def move_block_to(self, block_id: str, new_index: int) -> bool:
        """Move a block to ``new_index`` (clamped), shifting the others.

        This is the array move a drag-and-drop gesture ends with.
        """
        index = self._document.index_of(block_id)
        if index < 0:
            return False

        new_index = max(0, min(len(self._document) - 1, new_index))
        if new_index == index:
            return False

        blocks = list(self._document.blocks)
        blocks.insert(new_index, blocks.pop(index))
        self._commit(tuple(blocks), "block_moved", block_id=block_id, index=new_index)
        return True

    def convert_kind(self, block_id: str, target: BlockKind) -> bool:
        """Convert between message and callout.

        Message -> callout keeps speaker and content and applies the
        default title and icon. Callout -> message keeps content, takes the
        current speaker and drops title and icon. Freeform blocks never
        convert.

        Returns:
            True if the block was converted
        """
        index = self._document.index_of(block_id)
        if index < 0:
            return False

        block = self._document.blocks[index]
        if isinstance(block, MessageBlock) and target == "callout":
            converted: Block = CalloutBlock(
                id=block.id,
                speaker=block.speaker,
                content=block.content,
                callout_title=self.config.default_callout_title,
                callout_icon=self.config.default_callout_icon,
            )
        elif isinstance(block, CalloutBlock) and target == "message":
            converted = MessageBlock(
                id=block.id,
                speaker=self.current_speaker,
                content=block.content,
            )
        else:
            return False

        blocks = list(self._document.blocks)
        blocks[index] = converted
        self._commit(tuple(blocks), "block_converted", block_id=block_id, target=target)
        return True

    def set_explanation(self, explanation: str) -> bool:
        """Replace the explanation section.

        The explanation belongs to the external rich-text editor and is not
        part of the block history.
        """
        if explanation.strip() == self._document.explanation:
            return False
        self._document = self._document.with_explanation(explanation)
        logger.info("explanation_updated", length=len(self._document.explanation))
        self._emit()
        return True

    def undo(self) -> bool:
        """Restore the most recent undo entry. No-op when there is none."""
        previous = self._history.undo(self._document.blocks)
        if previous is None:
            return False
        self._document = self._document.with_blocks(previous)
        logger.info("undo", undo_depth=self._history.undo_depth, redo_depth=self._history.redo_depth)
        self._emit()
        return True

    def redo(self) -> bool:
        """Re-apply the most recently undone state. No-op when there is none."""
        following = self._history.redo(self._document.blocks)
        if following is None:
            return False
        self._document = self._document.with_blocks(following)
        logger.info("redo", undo_depth=self._history.undo_depth, redo_depth=self._history.redo_depth)
        self._emit()
        return True

    # External sync

    def sync(self, text: str) -> bool:
        """Bring the document in line with externally supplied text.

        Text the controller emitted itself is ignored. Otherwise the text is
        reconciled positionally (see SyncReconciler). If the incoming text
        was not in canonical form, subscribers receive the canonical text.
        Reconciliation is not recorded in the undo history.

        Returns:
            True if the document changed
        """
        if self._reconciler.is_echo(text):
            logger.debug("sync_skipped_echo")
            return False

        reconciled = self._reconciler.reconcile(self._document, text)
        changed = reconciled is not self._document
        self._document = reconciled

        canonical = self._document.render()
        if canonical != text:
            self._emit()
        else:
            self._text = canonical
            self._reconciler.mark_emitted(canonical)
        return changed
