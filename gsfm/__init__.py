"""Scene model and processors for global structure-from-motion."""

__version__ = "1.0.0"