"""Meeting Insights web service."""

from meeting_insights import __version__

__all__ = ["__version__"]
