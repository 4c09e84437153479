"""AI Team: a Claude-driven development team for GitHub and Railway."""

__version__ = "0.1.0"
