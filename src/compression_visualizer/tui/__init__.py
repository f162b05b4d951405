"""Textual wizard for the Compression Visualizer."""

from .app import run_tui

__all__ = ["run_tui"]
