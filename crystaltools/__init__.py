"""Build tools for Game Boy Color ROM projects: palettes, animations, includes and patches."""

__version__ = "1.0.0"