"""Unit tests for segment classification."""

import pytest

from lessonchat.chat.classifier import classify_segment, classify_segments
from lessonchat.chat.segments import Segment
from lessonchat.models.block import (
    DEFAULT_CALLOUT_ICON,
    DEFAULT_CALLOUT_TITLE,
    FREEFORM_MARKER,
    CalloutBlock,
    FreeformBlock,
    MessageBlock,
)


class TestCalloutClassification:
    """Tests for the [CALLOUT:icon:title] sentinel."""

    def test_full_sentinel(self):
        """Test icon and title are extracted and the sentinel stripped."""
        block = classify_segment(Segment("Karan", "[CALLOUT:💡:Remember]: Always test edge cases"))

        assert isinstance(block, CalloutBlock)
        assert block.speaker == "Karan"
        assert block.callout_icon == "💡"
        assert block.callout_title == "Remember"
        assert block.content == "Always test edge cases"

    def test_sentinel_without_icon_or_title(self):
        """Test missing icon and title fall back to defaults."""
        block = classify_segment(Segment("Karan", "[CALLOUT]: Body"))

        assert isinstance(block, CalloutBlock)
        assert block.callout_icon == DEFAULT_CALLOUT_ICON
        assert block.callout_title == DEFAULT_CALLOUT_TITLE
        assert block.content == "Body"

    def test_sentinel_with_icon_only(self):
        """Test an icon without a title."""
        block = classify_segment(Segment("Karan", "[CALLOUT:⭐]: Body"))

        assert block.callout_icon == "⭐"
        assert block.callout_title == DEFAULT_CALLOUT_TITLE

    def test_title_may_contain_colons(self):
        """Test colons after the icon belong to the title."""
        block = classify_segment(Segment("Karan", "[CALLOUT:💡:Tip: loops]: Body"))

        assert block.callout_title == "Tip: loops"

    def test_multiline_body(self):
        """Test the callout body keeps its newlines."""
        block = classify_segment(Segment("Karan", "[CALLOUT:💡:T]: line one\nline two"))

        assert block.content == "line one\nline two"

    def test_callout_marker_speaker_without_sentinel(self):
        """Test the reserved CALLOUT speaker yields a default callout."""
        block = classify_segment(Segment("CALLOUT", "Plain body"))

        assert isinstance(block, CalloutBlock)
        assert block.content == "Plain body"
        assert block.callout_title == DEFAULT_CALLOUT_TITLE

    def test_malformed_sentinel_degrades_to_message(self):
        """Test an unterminated sentinel is just message text."""
        block = classify_segment(Segment("Karan", "[CALLOUT:💡:Remember Always test"))

        assert isinstance(block, MessageBlock)
        assert block.content == "[CALLOUT:💡:Remember Always test"


class TestFreeformClassification:
    """Tests for the [FREEFORM_CANVAS] sentinel."""

    def test_valid_payload(self):
        """Test JSON payload is decoded."""
        block = classify_segment(Segment("FREEFORM", '[FREEFORM_CANVAS]:{"shapes": [1, 2]}'))

        assert isinstance(block, FreeformBlock)
        assert block.freeform_payload == {"shapes": [1, 2]}
        assert block.content == '{"shapes":[1,2]}'
        assert block.speaker == FREEFORM_MARKER

    def test_any_speaker_with_sentinel(self):
        """Test the sentinel alone is enough to classify as freeform."""
        block = classify_segment(Segment("Canvas", "[FREEFORM_CANVAS]:{}"))

        assert isinstance(block, FreeformBlock)
        assert block.freeform_payload == {}

    def test_malformed_json_is_not_fatal(self):
        """Test undecodable JSON yields a freeform block with no payload."""
        block = classify_segment(Segment("Canvas", "[FREEFORM_CANVAS]:{not-json"))

        assert isinstance(block, FreeformBlock)
        assert block.freeform_payload is None
        assert block.content == "{not-json"

    def test_freeform_speaker_without_sentinel(self):
        """Test the FREEFORM speaker treats the whole content as JSON."""
        block = classify_segment(Segment("FREEFORM", '{"a": 1}'))

        assert isinstance(block, FreeformBlock)
        assert block.freeform_payload == {"a": 1}

    def test_empty_freeform(self):
        """Test an unauthored canvas has no payload and empty content."""
        block = classify_segment(Segment("FREEFORM", ""))

        assert isinstance(block, FreeformBlock)
        assert block.freeform_payload is None
        assert block.content == ""

    def test_unnamed_segment_with_sentinel(self):
        """Test freeform blocks survive without a speaker."""
        block = classify_segment(Segment("", "[FREEFORM_CANVAS]:[1,2,3]"))

        assert isinstance(block, FreeformBlock)
        assert block.freeform_payload == [1, 2, 3]


class TestMessageClassification:
    """Tests for plain messages and filtering."""

    def test_plain_message(self):
        """Test ordinary segments become messages unchanged."""
        block = classify_segment(Segment("Ann", "Hello\nthere"))

        assert isinstance(block, MessageBlock)
        assert block.speaker == "Ann"
        assert block.content == "Hello\nthere"

    @pytest.mark.parametrize("speaker", ["", "   "])
    def test_unnamed_message_dropped(self, speaker):
        """Test segments without a speaker never become blocks."""
        assert classify_segment(Segment(speaker, "orphan text")) is None

    def test_unnamed_callout_dropped(self):
        """Test a callout sentinel without a speaker is dropped."""
        assert classify_segment(Segment("", "[CALLOUT:💡:T]: body")) is None

    def test_classify_segments_order_and_fresh_ids(self):
        """Test order is preserved, orphans dropped and ids unique."""
        blocks = classify_segments([
            Segment("", "orphan"),
            Segment("Ann", "Hi"),
            Segment("Karan", "[CALLOUT:💡:T]: body"),
            Segment("FREEFORM", "{}"),
        ])

        assert [b.kind for b in blocks] == ["message", "callout", "freeform"]
        assert len({b.id for b in blocks}) == 3
