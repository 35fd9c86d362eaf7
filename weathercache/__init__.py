"""Weather lookup service with a persistent record cache and periodic refresh."""

__version__ = "0.1.0"
