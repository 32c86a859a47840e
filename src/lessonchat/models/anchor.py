"""Annotation anchor models."""

from pydantic import BaseModel, Field


class TextSelection(BaseModel):
    """Selection reported by the host inside one block's rendered content."""

    start: int = Field(..., description="Start offset of the selection")
    end: int = Field(..., description="End offset of the selection (exclusive)")
    text: str = Field(..., description="Selected text as reported by the host")


class Anchor(BaseModel):
    """Persistent pointer to an annotated range of a block's content.

    Anchors are plain offsets. They are handed to external annotation
    storage and are not rebased when the block is later edited.
    """

    block_index: int = Field(
        ...,
        ge=0,
        description="Index of the owning block at the time the anchor was made",
    )

    start: int = Field(..., ge=0, description="Start offset in the block content")

    end: int = Field(..., ge=0, description="End offset in the block content (exclusive)")

    text: str = Field(..., min_length=2, description="Selected text, trimmed")

    model_config = {"frozen": True}
