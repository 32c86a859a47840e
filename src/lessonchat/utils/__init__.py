"""Shared utilities for lessonchat."""
