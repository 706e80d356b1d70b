"""galaxyctl — per-user layer registry."""

__version__ = "0.1.0"
