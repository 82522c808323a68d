"""firmsite: content backend for the firm website (articles and gallery)."""

__version__ = "0.1.0"
