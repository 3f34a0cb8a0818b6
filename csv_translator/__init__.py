"""CSV column-aware translator (Google Cloud Translation v3 backend)."""

__version__ = "0.1.0"
