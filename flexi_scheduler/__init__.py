"""Production scheduling engine for the Flexi printing and packaging line."""

__version__ = "0.1.0"
