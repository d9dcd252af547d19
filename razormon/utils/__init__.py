"""Utility helpers (logging, warnings, progress bars)."""
