"""ICAP message building and parsing, and ICAP service configuration."""

__version__ = "0.1.0"
__all__ = ["__version__"]