"""
Shared utilities for termpose.

Common functionality used across modules:
- Logger setup
- Text comparison
- Timestamps
"""

from termpose.utils.text_processing import get_meaningful_diff
from termpose.utils.timestamp import now

__all__ = ["get_meaningful_diff", "now"]
