"""Pydantic and dataclass models for lessonchat."""

from lessonchat.models.anchor import Anchor, TextSelection
from lessonchat.models.block import (
    Block,
    BlockPatch,
    CalloutBlock,
    FreeformBlock,
    MessageBlock,
)
from lessonchat.models.config import EditorConfig
from lessonchat.models.document import ChatDocument

__all__ = [
    "Anchor",
    "Block",
    "BlockPatch",
    "CalloutBlock",
    "ChatDocument",
    "EditorConfig",
    "FreeformBlock",
    "MessageBlock",
    "TextSelection",
]
