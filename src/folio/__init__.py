"""Folio - serve a directory of markdown documents as a website."""

__version__ = "0.1.0"
