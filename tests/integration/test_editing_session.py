"""Integration tests for a full editing session.

Drives the controller the way a host editor would: parse, mutate, listen
for emitted text, feed external text back in and anchor annotations.
"""

from lessonchat.annotations.locator import AnnotationLocator
from lessonchat.editing.controller import EditController
from lessonchat.models.anchor import TextSelection
from lessonchat.models.block import CalloutBlock, MessageBlock
from lessonchat.models.document import ChatDocument


class TestEditingSession:
    """End-to-end editing workflows."""

    def test_emitted_text_feeds_back_as_echo(self, lesson_text):
        """Test a host that echoes every change back causes no loop."""
        controller = EditController.from_text(lesson_text)
        received = []

        def host(text):
            received.append(text)
            assert not controller.sync(text)

        controller.subscribe(host)
        controller.append_message("One more thing.")
        controller.undo()

        assert len(received) == 2
        assert received[-1] == lesson_text

    def test_every_emission_reparses_to_document(self, lesson_text):
        """Test emitted text always parses back to the live document."""
        controller = EditController.from_text(lesson_text)
        received = []
        controller.subscribe(received.append)

        first = controller.blocks[0]
        controller.edit_block(first.id, content="Welcome back!\n\nToday we cover loops.")
        controller.insert_callout_at(1, "Loops need an iterable")
        controller.move_block(controller.blocks[-1].id, "up")
        controller.insert_freeform_at(-1)

        for text in received:
            assert ChatDocument.parse(text).render() == text
        assert ChatDocument.parse(received[-1]).structurally_equals(controller.document)

    def test_undo_redo_inverse(self, three_block_document):
        """Test undo then redo returns to the mutated state."""
        controller = EditController(three_block_document)
        original = controller.document

        controller.insert_message_at(1, "inserted")
        mutated = controller.document

        controller.undo()
        assert controller.document.structurally_equals(original)
        controller.redo()
        assert controller.document.structurally_equals(mutated)

    def test_conversion_symmetry(self, three_block_document):
        """Test message -> callout -> message keeps content exactly."""
        controller = EditController(three_block_document)
        target = controller.blocks[1]

        controller.convert_kind(target.id, "callout")
        assert isinstance(controller.blocks[1], CalloutBlock)
        controller.convert_kind(target.id, "message")

        restored = controller.blocks[1]
        assert isinstance(restored, MessageBlock)
        assert restored.content == target.content
        assert restored.id == target.id

    def test_external_edit_preserves_other_ids(self, lesson_text):
        """Test editing one block externally only renews that block's id."""
        controller = EditController.from_text(lesson_text)
        before = [b.id for b in controller.blocks]

        edited = lesson_text.replace("It repeats a block", "It runs a block")
        assert controller.sync(edited)

        after = [b.id for b in controller.blocks]
        changed = [i for i, (a, b) in enumerate(zip(before, after)) if a != b]
        assert changed == [2]

    def test_annotations_follow_live_document(self, lesson_text):
        """Test anchors resolve against the current block order."""
        controller = EditController.from_text(lesson_text)
        locator = AnnotationLocator(lambda: controller.document)
        callout = controller.blocks[3]

        anchor = locator.locate(callout.id, TextSelection(start=7, end=11, text="test"))
        assert anchor.block_index == 3
        assert not locator.is_stale(anchor)

        controller.move_block_to(callout.id, 0)
        moved = locator.locate(callout.id, TextSelection(start=7, end=11, text="test"))
        assert moved.block_index == 0
        assert locator.is_stale(anchor)
