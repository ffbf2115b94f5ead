"""searchconfig - Windows Search configuration and COM API registration."""

__version__ = "1.0.0"
