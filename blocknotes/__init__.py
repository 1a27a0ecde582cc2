"""Block-based personal notebook: pages, blocks, calendar events and undo."""

__version__ = "0.1.0"
