"""PubliManager persistence and sync layer."""

__version__ = "2.0.0"
