"""
Default values for termpose printing.

Provides shared defaults used by:
- config.py (base layer under environment and YAML overrides)
- printer.py (when no PrintConfig is given)
"""

from typing import Any, Dict

# One tab per nesting level
DEFAULT_INDENT = "\t"

# Maximum width of a single-line form, indentation excluded
DEFAULT_LINE_WIDTH = 80


def get_default_print_config() -> Dict[str, Any]:
    """
    Get the default printer settings as a plain dict.

    Returns:
        Dict with every field of PrintConfig
    """
    return {
        "indent": DEFAULT_INDENT,
        "line_width": DEFAULT_LINE_WIDTH,
    }
