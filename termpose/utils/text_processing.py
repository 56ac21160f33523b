"""Text comparison utilities for roundtrip reporting."""

import difflib
import re
from typing import List, Tuple


def set_max_consecutive_blank_lines(content: str, max_consecutive: int = 1) -> str:
    """
    Normalize consecutive blank lines to a maximum number.

    Args:
        content: The text content to normalize
        max_consecutive: Maximum number of consecutive blank lines to allow.
                        Use 0 to remove all blank lines (default: 1)

    Returns:
        Content with normalized blank lines

    Example:
        >>> set_max_consecutive_blank_lines("text\\n\\n\\n\\nmore", max_consecutive=1)
        'text\\n\\nmore'
        >>> set_max_consecutive_blank_lines("text\\n\\n\\n\\nmore", max_consecutive=0)
        'text\\nmore'
    """
    if max_consecutive == 0:
        # Match ANY blank lines (1 or more)
        pattern = r'\n[ \t]*\n([ \t]*\n)*'
    else:
        # Match 2+ consecutive blank lines only
        pattern = r'\n[ \t]*\n([ \t]*\n)+'

    replacement = '\n' * (max_consecutive + 1)

    return re.sub(pattern, replacement, content)


def get_meaningful_diff(
    text1: str,
    text2: str,
    name1: str = "before",
    name2: str = "after",
    ignore_blank_lines: bool = False,
    context_lines: int = 3,
) -> Tuple[List[str], int]:
    """
    Compare two texts line by line.

    Args:
        text1: First text
        text2: Second text
        name1: Label of the first text in the diff header
        name2: Label of the second text in the diff header
        ignore_blank_lines: Drop blank lines before comparing. Only safe outside
            block quotes, where blank lines carry no meaning
        context_lines: Number of context lines around differences (default: 3)

    Returns:
        Tuple of (diff_lines, num_differences):
        - diff_lines: List of unified diff output lines
        - num_differences: Count of changed lines (excluding headers)

    Example:
        >>> diff_lines, num_diffs = get_meaningful_diff("a\\nb\\n", "a\\nc\\n")
        >>> num_diffs
        2
    """
    if ignore_blank_lines:
        text1 = set_max_consecutive_blank_lines(text1, max_consecutive=0)
        text2 = set_max_consecutive_blank_lines(text2, max_consecutive=0)

    lines1 = text1.split('\n')
    lines2 = text2.split('\n')

    if lines1 == lines2:
        return [], 0

    diff = list(difflib.unified_diff(
        lines1,
        lines2,
        fromfile=name1,
        tofile=name2,
        lineterm='',
        n=context_lines
    ))

    # Count actual differences (lines starting with + or -, excluding headers)
    num_diffs = sum(1 for line in diff if line.startswith(('+', '-')))
    header_lines = sum(1 for line in diff if line.startswith(('---', '+++')))
    num_diffs -= header_lines

    return diff, num_diffs
