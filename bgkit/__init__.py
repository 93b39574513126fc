"""Image file input/output with pixel-format conversion, and a hierarchical text tree store."""

__version__ = "0.1.0"