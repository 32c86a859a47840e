"""Editing session: mutation API, undo/redo history and external sync."""

from lessonchat.editing.controller import EditController
from lessonchat.editing.history import EditHistory
from lessonchat.editing.sync import SyncReconciler

__all__ = ["EditController", "EditHistory", "SyncReconciler"]
