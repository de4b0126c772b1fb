"""Serve a local directory over HTTP until interrupted."""

__version__ = "0.1.0"
