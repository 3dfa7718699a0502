"""fluide - bootstrap and build Fluide theme projects."""

__version__ = "0.1.0"
