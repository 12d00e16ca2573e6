"""Feature-oriented end-to-end test framework: features, environments, hooks and filters."""

__version__ = "0.1.0"

__all__ = ["types", "features", "flags", "envconf", "action", "env"]