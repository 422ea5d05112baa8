"""Dive log interchange server."""

__version__ = "0.1.0"
