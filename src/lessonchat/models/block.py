"""Block models for conversational lessons.

A lesson is an ordered sequence of blocks. Each block is one of three
variants, discriminated on ``kind``:

- ``MessageBlock``: a speaker turn
- ``CalloutBlock``: a highlighted takeaway with an icon and title
- ``FreeformBlock``: an opaque canvas payload

Blocks are immutable. Editing a block produces a new value carrying the
same ``id``, which makes history snapshots safe to share.
"""

import json
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, field_validator, model_validator

from lessonchat.utils.ids import generate_block_id


# Reserved speaker labels
CALLOUT_MARKER = "CALLOUT"
FREEFORM_MARKER = "FREEFORM"

DEFAULT_CALLOUT_TITLE = "Key Takeaway"
DEFAULT_CALLOUT_ICON = "🧠"

BlockKind = Literal["message", "callout", "freeform"]

SPEAKER_MAX_LENGTH = 60


def check_speaker_label(label: str) -> str:
    """Validate a message speaker label.

    A label is only usable if ``Label: text`` parses back to a message from
    the same speaker, so the reserved markers (compared case-sensitively,
    as the classifier does) and anything the speaker-line pattern would
    not match are rejected.

    Args:
        label: Speaker label

    Returns:
        The trimmed label

    Raises:
        ValueError: If the label would not survive a round trip
    """
    label = label.strip()
    if label in (CALLOUT_MARKER, FREEFORM_MARKER):
        raise ValueError(f"Speaker label {label!r} is reserved")
    if ":" in label or "\n" in label:
        raise ValueError(f"Speaker label may not contain ':' or newlines: {label!r}")
    if label.startswith("["):
        raise ValueError(f"Speaker label may not start with '[': {label!r}")
    if len(label) > SPEAKER_MAX_LENGTH:
        raise ValueError(f"Speaker label longer than {SPEAKER_MAX_LENGTH} characters: {label!r}")
    if not any(ch.isalpha() for ch in label):
        raise ValueError(f"Speaker label must contain a letter: {label!r}")
    return label


def dump_payload(payload: Any) -> str:
    """Serialize a freeform payload to compact JSON.

    Matches the compact form browsers produce with JSON.stringify so stored
    lessons stay byte-identical across editors.

    Args:
        payload: Any JSON-compatible value

    Returns:
        Compact JSON text

    Examples:
        >>> dump_payload({"shapes": [1, 2]})
        '{"shapes":[1,2]}'
    """
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


def load_payload(text: str) -> Optional[Any]:
    """Decode freeform payload JSON, returning None when it is not valid JSON."""
    try:
        return json.loads(text)
    except ValueError:
        return None


class _BlockBase(BaseModel):
    """Fields shared by every block variant."""

    id: str = Field(
        default_factory=generate_block_id,
        description="Opaque identifier, unique within a document",
    )

    model_config = {"frozen": True, "str_strip_whitespace": True}

    def body(self) -> str:
        """Text emitted after the sentinel when the block is serialized."""
        return self.content

    def signature(self) -> tuple:
        """Structural identity of the block, ignoring its id.

        Returns:
            Tuple of (kind, speaker, body, callout_title, callout_icon)
        """
        return (self.kind, self.speaker, self.body(), None, None)

    def structurally_equals(self, other: "_BlockBase") -> bool:
        """Check whether two blocks are equal ignoring their ids."""
        return self.signature() == other.signature()


class MessageBlock(_BlockBase):
    """A single speaker turn."""

    kind: Literal["message"] = "message"

    speaker: str = Field(
        ...,
        min_length=1,
        description="Speaker label shown on the bubble",
    )

    content: str = Field(
        default="",
        description="Message text (may contain newlines and blank lines)",
    )

    @field_validator("speaker")
    @classmethod
    def _speaker_round_trips(cls, v: str) -> str:
        return check_speaker_label(v)


class CalloutBlock(_BlockBase):
    """A takeaway card rendered apart from the conversation."""

    kind: Literal["callout"] = "callout"

    speaker: str = Field(
        default=CALLOUT_MARKER,
        min_length=1,
        description="Speaker the callout was written under, or the CALLOUT marker",
    )

    content: str = Field(
        default="",
        description="Takeaway text",
    )

    callout_title: str = Field(
        default=DEFAULT_CALLOUT_TITLE,
        description="Card title (must not contain ']')",
    )

    callout_icon: str = Field(
        default=DEFAULT_CALLOUT_ICON,
        description="Card icon, usually a single emoji",
    )

    @model_validator(mode="before")
    @classmethod
    def _fill_defaults(cls, data: Any) -> Any:
        # Blank title/icon fall back to the defaults
        if isinstance(data, dict):
            data = dict(data)
            if not str(data.get("callout_title") or "").strip():
                data["callout_title"] = DEFAULT_CALLOUT_TITLE
            if not str(data.get("callout_icon") or "").strip():
                data["callout_icon"] = DEFAULT_CALLOUT_ICON
        return data

    @field_validator("callout_title")
    @classmethod
    def _title_without_bracket(cls, v: str) -> str:
        # "]" would close the sentinel early
        return v.replace("]", "")

    @field_validator("callout_icon")
    @classmethod
    def _icon_without_delimiters(cls, v: str) -> str:
        return v.replace(":", "").replace("]", "")

    def signature(self) -> tuple:
        return (self.kind, self.speaker, self.content, self.callout_title, self.callout_icon)


class FreeformBlock(_BlockBase):
    """An opaque drawing canvas.

    ``content`` holds the serialized payload. When ``freeform_payload`` is
    set, ``content`` is always its canonical compact JSON. When the stored
    JSON could not be decoded the payload is None and ``content`` keeps the
    raw text so nothing is lost on the next save.
    """

    kind: Literal["freeform"] = "freeform"

    speaker: str = Field(
        default=FREEFORM_MARKER,
        description="Always the FREEFORM marker",
    )

    content: str = Field(
        default="",
        description="Serialized payload (empty while the canvas is unauthored)",
    )

    freeform_payload: Optional[Any] = Field(
        default=None,
        description="Decoded canvas payload, None if missing or undecodable",
    )

    @model_validator(mode="before")
    @classmethod
    def _canonical_content(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("freeform_payload") is not None:
            data = dict(data)
            data["content"] = dump_payload(data["freeform_payload"])
        return data

    def body(self) -> str:
        return self.content or "{}"

    def signature(self) -> tuple:
        return (self.kind, FREEFORM_MARKER, self.body(), None, None)


Block = Annotated[
    Union[MessageBlock, CalloutBlock, FreeformBlock],
    Field(discriminator="kind"),
]

BlockListAdapter = TypeAdapter(list[Block])


class BlockPatch(BaseModel):
    """Changes to merge into an existing block.

    Only fields that were explicitly passed are applied. ``None`` for
    content, title or icon means "keep the current value"; ``None`` for
    ``freeform_payload`` clears the canvas.
    """

    content: Optional[str] = None
    callout_title: Optional[str] = None
    callout_icon: Optional[str] = None
    freeform_payload: Optional[Any] = None

    def apply_to(self, block: Block) -> Block:
        """Return a copy of ``block`` with this patch merged in.

        Fields that do not exist on the block's variant are ignored.

        Args:
            block: Block to patch

        Returns:
            New block with the same id
        """
        changes = self.model_dump(exclude_unset=True)
        data = block.model_dump()

        for key in ("content", "callout_title", "callout_icon"):
            if changes.get(key) is not None and key in data:
                data[key] = changes[key]

        if isinstance(block, FreeformBlock):
            if "freeform_payload" in changes:
                data["freeform_payload"] = changes["freeform_payload"]
                if changes["freeform_payload"] is None and changes.get("content") is None:
                    data["content"] = ""
            elif changes.get("content") is not None:
                # Raw payload text edited directly; keep payload in step
                data["freeform_payload"] = load_payload(changes["content"])

        return type(block).model_validate(data)
