"""reportcache — cache-backed PDF report generation."""

from reportcache.version import __version__

__all__ = ["__version__"]
