"""Speaker segment extraction for lesson transcripts.

This module splits the lesson mini-language into raw ``(speaker, content)``
segments. A line shaped like ``Speaker: text`` opens a new segment and every
other line belongs to the segment that is currently open. A line holding
only ``---`` ends the conversation; the rest of the text is the free-form
explanation and is never tokenized here.

Example:
    >>> extract_segments("Ann: Hi\\n\\nKaran: Hello")
    [Segment(speaker='Ann', content='Hi'), Segment(speaker='Karan', content='Hello')]
"""

import html
import re
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

from lessonchat.models.block import CALLOUT_MARKER, FREEFORM_MARKER, SPEAKER_MAX_LENGTH
from lessonchat.utils.logging import get_logger


logger = get_logger(__name__)

EXPLANATION_DELIMITER = "---"

# Speaker token: up to 60 non-colon characters at the start of a line
SPEAKER_LINE_RE = re.compile(rf"^([^:\n]{{1,{SPEAKER_MAX_LENGTH}}}):[ \t]*(.*)$")

RICH_HTML_TAG_RE = re.compile(
    r"</?(p|div|br|span|strong|em|ul|ol|li|h[1-6]|blockquote|pre|code)\b",
    re.IGNORECASE,
)

CODE_FENCE = "```"


@dataclass(frozen=True)
class Segment:
    """One raw speaker turn, before classification.

    Attributes:
        speaker: Trimmed speaker label ("" for an implicit unnamed segment)
        content: Segment text with surrounding whitespace trimmed
    """

    speaker: str
    content: str


def looks_like_rich_html(text: str) -> bool:
    """Check whether input was stored by a rich-text editor as HTML.

    Text with fenced code is always treated as plain text so tags quoted
    inside code samples are left alone.
    """
    if not text:
        return False
    if CODE_FENCE in text:
        return False
    return RICH_HTML_TAG_RE.search(text) is not None


def html_to_plain_text(markup: str) -> str:
    """Convert rich-editor HTML into plain text, keeping line breaks.

    Block-level closing tags and ``<br>`` become newlines, table cells become
    tabs, every other tag is dropped and entities are unescaped.

    Args:
        markup: HTML produced by a rich-text editor

    Returns:
        Plain text with runs of blank lines collapsed to one

    Examples:
        >>> html_to_plain_text("<p>Ann: Hi</p><p>Karan: Hello</p>")
        'Ann: Hi\\nKaran: Hello'
    """
    if not markup:
        return ""

    text = re.sub(r"</(p|div|li|h[1-6]|blockquote|pre|tr)>", "\n", markup, flags=re.IGNORECASE)
    text = re.sub(r"<br\s*/?>", "\n", text, flags=re.IGNORECASE)
    text = re.sub(r"</(td|th)>", "\t", text, flags=re.IGNORECASE)
    text = re.sub(r"<[^>]*>", "", text)
    text = html.unescape(text)
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def normalize_chat_input(value: str) -> str:
    """Normalize line endings and unwrap rich-editor HTML."""
    if not value:
        return ""
    normalized = value.replace("\r\n", "\n").replace("\r", "\n")
    if not looks_like_rich_html(normalized):
        return normalized
    return html_to_plain_text(normalized)


def _is_fence(line: str) -> bool:
    return line.lstrip().startswith(CODE_FENCE)


def _scan_lines(lines: list[str]) -> Iterator[tuple[str, Optional[tuple[str, str]], bool]]:
    """Yield (line, speaker_match, inside_code_fence) for each line.

    An opening fence only counts when a fence line follows somewhere later
    in the text. A message left with an unclosed fence (typical while the
    author is still typing) therefore cannot swallow the blocks after it.
    """
    last_fence = max((i for i, line in enumerate(lines) if _is_fence(line)), default=-1)
    in_code_fence = False

    for i, line in enumerate(lines):
        fenced = in_code_fence
        match = None if in_code_fence else match_speaker_line(line)

        if _is_fence(match[1] if match else line):
            if in_code_fence:
                in_code_fence = False
            elif i < last_fence:
                in_code_fence = True

        yield line, match, fenced


def split_explanation(text: str) -> tuple[str, str]:
    """Split text at the first ``---`` delimiter line.

    Delimiter-looking lines inside fenced code are ignored.

    Args:
        text: Normalized lesson text

    Returns:
        Tuple of (chat_part, explanation); explanation is trimmed and empty
        when there is no delimiter
    """
    lines = text.split("\n")

    for i, (line, _, fenced) in enumerate(_scan_lines(lines)):
        if not fenced and line.rstrip() == EXPLANATION_DELIMITER:
            return "\n".join(lines[:i]), "\n".join(lines[i + 1:]).strip()

    return text, ""


def extract_explanation(text: str) -> Optional[str]:
    """Extract the explanation section after the ``---`` delimiter.

    Returns:
        Trimmed explanation, or None when absent or empty
    """
    _, explanation = split_explanation(normalize_chat_input(text))
    return explanation or None


def match_speaker_line(line: str) -> Optional[tuple[str, str]]:
    """Match a line that opens a new segment.

    The speaker must contain at least one letter, which stops timestamps
    such as ``12:30`` from opening bogus segments. Speakers starting with
    ``[`` are sentinels. A ``//`` glued to the colon (``https://...``) is a
    link, while ``Karan: // comment`` is still a speaker line.

    Args:
        line: Single line of text

    Returns:
        Tuple of (speaker, rest_of_line) if the line opens a segment, None otherwise

    Examples:
        >>> match_speaker_line("Ann: Hi there")
        ('Ann', 'Hi there')
        >>> match_speaker_line("12:30 we started") is None
        True
    """
    match = SPEAKER_LINE_RE.match(line)
    if not match:
        return None

    speaker = match.group(1).strip()
    rest = match.group(2)

    if not speaker or speaker.startswith("["):
        return None
    if not any(ch.isalpha() for ch in speaker):
        return None
    if line[match.end(1) + 1:].startswith("//"):
        return None

    return speaker, rest


def _iter_speaker_lines(chat_part: str) -> Iterator[tuple[str, Optional[tuple[str, str]]]]:
    """Yield (line, speaker_match) pairs, never matching inside code fences."""
    for line, match, _ in _scan_lines(chat_part.split("\n")):
        yield line, match


def extract_segments(
    text: str,
    allow_single: bool = False,
    known_speakers: Optional[Iterable[str]] = None,
) -> list[Segment]:
    """Split lesson text into ordered speaker segments.

    Args:
        text: Raw lesson text (plain or rich-editor HTML)
        allow_single: Permissive mode for single-block documents. Leading
            text before the first speaker line becomes an unnamed segment
            instead of being discarded.
        known_speakers: If given, only these speakers (case-insensitive) and
            the reserved CALLOUT/FREEFORM markers open segments. Other
            ``Label: text`` lines stay inside the current segment.

    Returns:
        Segments in source order
    """
    normalized = normalize_chat_input(text)
    if not normalized.strip():
        return []

    chat_part, _ = split_explanation(normalized)

    allowed: Optional[set[str]] = None
    if known_speakers is not None:
        allowed = {s.strip().lower() for s in known_speakers}
        allowed |= {CALLOUT_MARKER.lower(), FREEFORM_MARKER.lower()}

    segments: list[Segment] = []
    speaker: Optional[str] = None
    buffer: list[str] = []

    def flush() -> None:
        if speaker is not None:
            segments.append(Segment(speaker=speaker, content="\n".join(buffer).strip()))

    for line, match in _iter_speaker_lines(chat_part):
        if match and allowed is not None and match[0].lower() not in allowed:
            match = None

        if match:
            flush()
            speaker, first = match
            buffer = [first]
        elif speaker is not None:
            buffer.append(line)
        elif allow_single and line.strip():
            speaker = ""
            buffer = [line]
        # else: text before the first speaker is dropped

    flush()

    logger.debug(
        "segments_extracted",
        count=len(segments),
        allow_single=allow_single,
        restricted=allowed is not None,
    )
    return segments


def detect_speakers(text: str, allow_single: bool = False) -> list[str]:
    """Guess which ``Label:`` tokens are real speakers.

    Lines such as ``Note: ...`` or ``What went wrong: ...`` look like
    speaker lines. Real speakers tend to repeat, so speakers seen at least
    twice are kept, topped up in order of first appearance until there are
    two speakers (one in permissive mode).

    Args:
        text: Raw lesson text
        allow_single: Require only one speaker instead of two

    Returns:
        Speaker labels in order of first appearance (first-seen casing)

    Examples:
        >>> detect_speakers("Ann: Hi\\nNote: x\\nKaran: Yo\\nAnn: Bye\\nKaran: Ok")
        ['Ann', 'Karan']
    """
    chat_part, _ = split_explanation(normalize_chat_input(text))

    counts: dict[str, int] = {}
    first_label: dict[str, str] = {}
    for _, match in _iter_speaker_lines(chat_part):
        if not match:
            continue
        key = match[0].lower()
        counts[key] = counts.get(key, 0) + 1
        first_label.setdefault(key, match[0])

    required = 1 if allow_single else 2
    allowed = {key for key, count in counts.items() if count >= 2}
    for key in first_label:  # insertion order == first appearance
        if len(allowed) >= required:
            break
        allowed.add(key)

    return [label for key, label in first_label.items() if key in allowed]


def is_chat_transcript(text: str) -> bool:
    """Check whether text contains at least two speaker lines."""
    normalized = normalize_chat_input(text)
    if not normalized.strip():
        return False
    chat_part, _ = split_explanation(normalized)
    markers = [match for _, match in _iter_speaker_lines(chat_part) if match]
    return len(markers) >= 2
