"""Site Scuba - navigation and footer smoke auditing for websites."""

__version__ = "0.1.0"
