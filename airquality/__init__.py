"""Download, store, summarise and plot air-quality station measurements."""

__version__ = "0.1.0"