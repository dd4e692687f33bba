"""tidyctl - Rule-based folder organization with plan review and undo."""

__version__ = "0.1.0"
