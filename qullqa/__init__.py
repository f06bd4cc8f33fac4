"""Qullqa - versioned artifact store with an HTTP read path."""

__version__ = "0.1.0"
