"""Timestamp formatting utilities."""

from datetime import datetime


def now() -> str:
    """
    Current local time as a compact, sortable string for directory names.

    Example:
        >>> now()
        '20251114_123456'
    """
    return datetime.now().strftime("%Y%m%d_%H%M%S")


def format_elapsed(seconds: float) -> str:
    """
    Format a duration for display.

    Examples:
        format_elapsed(0.0042)  # "4.2ms"
        format_elapsed(3.5)     # "3.50s"
    """
    if seconds < 1:
        return f"{seconds * 1000:.1f}ms"
    return f"{seconds:.2f}s"
