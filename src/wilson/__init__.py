"""Wilson: supervisor and operator CLI for a small fleet of local services."""

__version__ = "0.4.0"
