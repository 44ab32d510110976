"""Ctrl Alt Vibe: community showcase for AI-assisted coding projects."""

__version__ = "0.1.0"
