"""Document loading with meta-refresh navigation."""

__version__ = "0.1.0"
