"""Applications intake backend: resume uploads and the Excel append store."""

__version__ = "1.0.0"
