"""Annotation anchoring for lesson blocks."""

from lessonchat.annotations.locator import AnnotationLocator

__all__ = ["AnnotationLocator"]
