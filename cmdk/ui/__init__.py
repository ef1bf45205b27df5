"""Textual user interface for cmdk."""
