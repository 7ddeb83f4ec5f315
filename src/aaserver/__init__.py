"""aaserver: local agent assignment server."""

__version__ = "0.1.0"
