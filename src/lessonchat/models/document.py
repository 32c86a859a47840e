"""Parsed representation of a conversational lesson."""

from dataclasses import dataclass, field, replace
from typing import Iterable, Iterator, Optional

from lessonchat.models.block import Block


@dataclass(frozen=True)
class ChatDocument:
    """Ordered lesson blocks plus the trailing explanation.

    IMPORTANT: Order is meaningful. It is both render order and
    serialization order.

    Attributes:
        blocks: Blocks in document order (ids unique)
        explanation: Text after the ``---`` delimiter ("" when absent)
        source_text: Text the document was parsed from, for debugging
    """

    blocks: tuple[Block, ...] = ()
    explanation: str = ""
    source_text: str = field(default="", compare=False, repr=False)

    def __post_init__(self):
        """Accept any iterable of blocks and reject duplicate ids."""
        blocks = tuple(self.blocks)
        ids = [b.id for b in blocks]
        if len(set(ids)) != len(ids):
            raise ValueError(f"Duplicate block ids in document: {ids}")
        object.__setattr__(self, "blocks", blocks)

    @classmethod
    def parse(
        cls,
        text: str,
        known_speakers: Optional[Iterable[str]] = None,
    ) -> "ChatDocument":
        """Parse lesson text into a document.

        Uses the permissive extractor mode so a lesson holding a single
        freeform block or callout still parses.

        Args:
            text: Lesson mini-language text
            known_speakers: Optional closed set of speaker labels

        Returns:
            Parsed ChatDocument with fresh block ids
        """
        from lessonchat.chat.classifier import classify_segments
        from lessonchat.chat.segments import extract_segments, normalize_chat_input, split_explanation

        segments = extract_segments(text, allow_single=True, known_speakers=known_speakers)
        _, explanation = split_explanation(normalize_chat_input(text))

        return cls(
            blocks=tuple(classify_segments(segments)),
            explanation=explanation,
            source_text=text,
        )

    def render(self) -> str:
        """Render the document back to canonical lesson text."""
        from lessonchat.chat.renderer import render_document

        return render_document(self.blocks, self.explanation)

    def __len__(self) -> int:
        return len(self.blocks)

    def __iter__(self) -> Iterator[Block]:
        return iter(self.blocks)

    def index_of(self, block_id: str) -> int:
        """Return the index of the block with ``block_id``, or -1."""
        for i, block in enumerate(self.blocks):
            if block.id == block_id:
                return i
        return -1

    def get(self, block_id: str) -> Optional[Block]:
        """Return the block with ``block_id``, or None."""
        index = self.index_of(block_id)
        return self.blocks[index] if index >= 0 else None

    def block_at(self, index: int) -> Optional[Block]:
        """Return the block at ``index``, or None when out of range."""
        if 0 <= index < len(self.blocks):
            return self.blocks[index]
        return None

    def is_first(self, block_id: str) -> bool:
        return bool(self.blocks) and self.blocks[0].id == block_id

    def is_last(self, block_id: str) -> bool:
        return bool(self.blocks) and self.blocks[-1].id == block_id

    def signature(self) -> tuple:
        """Structural identity: block signatures in order plus explanation."""
        return (tuple(b.signature() for b in self.blocks), self.explanation.strip())

    def structurally_equals(self, other: "ChatDocument") -> bool:
        """Compare two documents ignoring block ids."""
        return self.signature() == other.signature()

    def with_blocks(self, blocks: Iterable[Block]) -> "ChatDocument":
        return replace(self, blocks=tuple(blocks))

    def with_explanation(self, explanation: str) -> "ChatDocument":
        return replace(self, explanation=explanation.strip())
