"""Lesson renderer: blocks back to the mini-language.

This is the exact inverse of extraction + classification. Rendering then
re-parsing any valid document yields a structurally equal document.
"""

from typing import Iterable

from lessonchat.chat.segments import EXPLANATION_DELIMITER
from lessonchat.models.block import (
    CALLOUT_MARKER,
    FREEFORM_MARKER,
    Block,
    CalloutBlock,
    FreeformBlock,
)


BLOCK_SEPARATOR = "\n\n"

# Private-use marker standing in for newlines inside a block while blocks are joined
NEWLINE_MARKER = "\ue000NL\ue000"


def render_block(block: Block) -> str:
    """Render a single block as one speaker line (plus continuation lines).

    Args:
        block: Block to render

    Returns:
        Block text without a trailing separator

    Examples:
        >>> render_block(MessageBlock(speaker="Ann", content="Hi"))
        'Ann: Hi'
        >>> render_block(FreeformBlock())
        'FREEFORM: [FREEFORM_CANVAS]:{}'
    """
    if isinstance(block, FreeformBlock):
        return f"{FREEFORM_MARKER}: [FREEFORM_CANVAS]:{block.body()}"

    if isinstance(block, CalloutBlock):
        speaker = block.speaker or CALLOUT_MARKER
        return (
            f"{speaker}: [CALLOUT:{block.callout_icon}:{block.callout_title}]: "
            f"{block.content}"
        )

    return f"{block.speaker}: {block.content}"


def _encode_newlines(text: str) -> str:
    return text.replace("\n", NEWLINE_MARKER)


def _decode_newlines(text: str) -> str:
    return text.replace(NEWLINE_MARKER, "\n")


def render_document(blocks: Iterable[Block], explanation: str = "") -> str:
    """Render blocks and explanation to lesson text.

    Internal newlines of each block are encoded before the blocks are
    joined with a blank line and decoded afterwards, so the blank line
    between blocks is the only structural separator.

    Args:
        blocks: Blocks in document order
        explanation: Explanation section (omitted when blank)

    Returns:
        Canonical lesson text

    Examples:
        >>> render_document([MessageBlock(speaker="Ann", content="Hi")], "Why it works")
        'Ann: Hi\\n---\\nWhy it works'
    """
    chat_part = BLOCK_SEPARATOR.join(_encode_newlines(render_block(b)) for b in blocks)
    chat_part = _decode_newlines(chat_part)

    if explanation.strip():
        return f"{chat_part}\n{EXPLANATION_DELIMITER}\n{explanation.strip()}"
    return chat_part
