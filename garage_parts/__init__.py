"""Parts inventory and automated reordering service for a vehicle service shop."""

__version__ = "0.1.0"
