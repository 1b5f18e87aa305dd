"""Media taxonomy filter: hierarchical term filtering for media entities."""

__version__ = "0.3.0"
