"""VynorNews client core: session, feed and saved-items state."""

__version__ = "0.1.0"
