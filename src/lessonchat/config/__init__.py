"""Configuration loading for lessonchat."""
