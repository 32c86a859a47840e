"""Lesson mini-language: segment extraction, classification and rendering."""

from lessonchat.chat.classifier import classify_segment, classify_segments
from lessonchat.chat.renderer import render_block, render_document
from lessonchat.chat.segments import (
    Segment,
    detect_speakers,
    extract_explanation,
    extract_segments,
    is_chat_transcript,
)

__all__ = [
    "Segment",
    "classify_segment",
    "classify_segments",
    "detect_speakers",
    "extract_explanation",
    "extract_segments",
    "is_chat_transcript",
    "render_block",
    "render_document",
]
