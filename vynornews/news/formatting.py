"""Display helpers for feed items."""

from datetime import datetime


def format_published(value: str) -> str:
    """Format an ISO-8601 instant as ``dd/mm/YYYY HH:MM``.

    Returns the input unchanged when it cannot be parsed, since the provider
    sometimes sends free text here.
    """
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (ValueError, AttributeError):
        return value
    return parsed.strftime("%d/%m/%Y %H:%M")
