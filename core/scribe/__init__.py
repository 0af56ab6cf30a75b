"""Scribe Core - local model cache and acquisition."""

__version__ = "0.1.0"
