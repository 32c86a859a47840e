"""Segment classification into typed lesson blocks.

Sentinel prefixes at the start of a segment's content turn it into a
special block:

- ``[CALLOUT:icon:title]: body`` -> CalloutBlock
- ``[FREEFORM_CANVAS]:json`` (or the FREEFORM speaker) -> FreeformBlock

Anything else is a MessageBlock. Malformed sentinels never raise; they
simply fail to match and the segment stays a plain message.
"""

import re
from typing import Iterable, Optional

from lessonchat.chat.segments import Segment
from lessonchat.models.block import (
    CALLOUT_MARKER,
    DEFAULT_CALLOUT_ICON,
    DEFAULT_CALLOUT_TITLE,
    FREEFORM_MARKER,
    Block,
    CalloutBlock,
    FreeformBlock,
    MessageBlock,
    load_payload,
)
from lessonchat.utils.logging import get_logger


logger = get_logger(__name__)

# [CALLOUT:icon:title]: body (icon and title optional, title has no "]")
CALLOUT_RE = re.compile(r"^\[CALLOUT(?::([^:]*?))?(?::([^\]]*?))?\]:\s*")

FREEFORM_RE = re.compile(r"^\[FREEFORM_CANVAS\]:(.*)$", re.DOTALL)


def classify_segment(segment: Segment, index: int = 0) -> Optional[Block]:
    """Turn one raw segment into a typed block.

    Args:
        segment: Segment from the extractor
        index: Position of the segment (used for log context only)

    Returns:
        New block with a fresh id, or None if the segment has no speaker
        and is not a freeform canvas

    Examples:
        >>> classify_segment(Segment("Karan", "[CALLOUT:💡:Remember]: Test edge cases"))
        CalloutBlock(..., callout_title='Remember', callout_icon='💡')
    """
    speaker = segment.speaker.strip()
    content = segment.content

    callout_match = CALLOUT_RE.match(content)
    if callout_match or speaker == CALLOUT_MARKER:
        if not speaker:
            return None
        if callout_match:
            icon = callout_match.group(1) or DEFAULT_CALLOUT_ICON
            title = callout_match.group(2) or DEFAULT_CALLOUT_TITLE
            body = content[callout_match.end():].strip()
        else:
            icon, title, body = DEFAULT_CALLOUT_ICON, DEFAULT_CALLOUT_TITLE, content
        return CalloutBlock(
            speaker=speaker,
            content=body,
            callout_title=title,
            callout_icon=icon,
        )

    freeform_match = FREEFORM_RE.match(content)
    if freeform_match or speaker == FREEFORM_MARKER:
        raw = (freeform_match.group(1) if freeform_match else content).strip()
        payload = load_payload(raw) if raw else None
        if raw and payload is None:
            logger.warning("freeform_payload_undecodable", index=index, length=len(raw))
        return FreeformBlock(content=raw, freeform_payload=payload)

    if not speaker:
        logger.debug("segment_dropped", index=index, reason="no_speaker")
        return None

    return MessageBlock(speaker=speaker, content=content)


def classify_segments(segments: Iterable[Segment]) -> list[Block]:
    """Classify segments in order, dropping those without a speaker.

    Args:
        segments: Segments from the extractor

    Returns:
        Typed blocks in source order, each with a fresh id
    """
    blocks = []
    for index, segment in enumerate(segments):
        block = classify_segment(segment, index)
        if block is not None:
            blocks.append(block)

    logger.debug("segments_classified", blocks=len(blocks))
    return blocks
