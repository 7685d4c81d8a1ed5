"""Touchscreen sample filters and raw touchscreen protocol decoders."""

__version__ = "0.1.0"