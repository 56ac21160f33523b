"""
Termpose Printer

Renders a Term as canonical termpose text. For every Term `t`,
`parse(pretty_print(t)) == t`, and a given tree always renders the same way
under a given PrintConfig.

Rendering rules:
- Atoms print bare when possible, otherwise quoted with backslash escapes
- Multi-line atoms print as block quotes when their text survives the block
  rules (see is_block_safe), otherwise quoted with \\n escapes
- A form prints on one line when every child is an atom or a one-child tag
  chain (`cost:5`) and the line fits; the last child may open a block quote
- Otherwise the head goes on its own line and each child on a deeper line
"""

from typing import List, Optional, Tuple

from termpose.config import PrintConfig
from termpose.term import Term

STRUCTURAL = '():"\\'
QUOTE_ESCAPES = {'"': '\\"', "\\": "\\\\", "\n": "\\n", "\t": "\\t", "\r": "\\r"}


def _needs_quotes(text: str) -> bool:
    return not text or any(char.isspace() or char in STRUCTURAL for char in text)


def escape_atom(text: str) -> str:
    """
    Render atom text as a single inline token.

    Example:
        >>> escape_atom("hammer")
        'hammer'
        >>> escape_atom("bee's knee")
        '"bee\\'s knee"'
        >>> escape_atom("")
        '""'
    """
    if not _needs_quotes(text):
        return text
    return '"' + "".join(QUOTE_ESCAPES.get(char, char) for char in text) + '"'


def is_block_safe(text: str) -> bool:
    """
    Check whether multi-line text reads back unchanged from a block quote.

    Block quotes strip common indentation, turn whitespace-only lines into empty
    lines and drop trailing blank lines, so text relying on any of those is
    printed as an escaped inline quote instead.
    """
    if "\n" not in text or "\r" in text:
        return False
    lines = text.split("\n")
    if not lines[0] or lines[0][0] in " \t" or not lines[-1]:
        return False
    return all(line == "" or line.strip(" \t") for line in lines)


def _inline(term: Term) -> Optional[str]:
    """Single-token rendering of an atom or one-child tag chain, None if there is none."""
    if term.is_atom:
        return None if is_block_safe(term.head) else escape_atom(term.head)
    if len(term.children) == 1:
        child = _inline(term.children[0])
        if child is not None:
            return f"{escape_atom(term.head)}:{child}"
    return None


def _block_opener(term: Term) -> Optional[Tuple[str, str]]:
    """Token that ends a line and opens a block quote, plus the block text."""
    if term.is_atom:
        return ('"', term.head) if is_block_safe(term.head) else None
    if len(term.children) != 1:
        return None
    inner = _block_opener(term.children[0])
    if inner is None:
        return None
    opener, text = inner
    if opener == '"' and not _needs_quotes(term.head):
        # A quote right after a bare word acts as an implicit colon
        return f'{term.head}"', text
    return f"{escape_atom(term.head)}:{opener}", text


class TermposePrinter:
    """Accumulates output lines for one pretty_print call."""

    def __init__(self, config: PrintConfig):
        self.config = config
        self.lines: List[str] = []

    def _emit_block(self, text: str, depth: int) -> None:
        pad = self.config.indent * depth
        for line in text.split("\n"):
            self.lines.append(pad + line if line else "")

    def render(self, term: Term, depth: int = 0) -> None:
        pad = self.config.indent * depth

        if term.is_atom:
            if is_block_safe(term.head):
                self.lines.append(pad + '"')
                self._emit_block(term.head, depth + 1)
            else:
                self.lines.append(pad + escape_atom(term.head))
            return

        head = escape_atom(term.head)
        parts = [head]
        block = None
        last = len(term.children) - 1
        for i, child in enumerate(term.children):
            token = _inline(child)
            if token is None and i == last:
                opener = _block_opener(child)
                if opener is not None:
                    token, block = opener
            if token is None:
                parts = None
                break
            parts.append(token)

        if parts is not None:
            line = " ".join(parts)
            if len(line) <= self.config.line_width:
                self.lines.append(pad + line)
                if block is not None:
                    self._emit_block(block, depth + 1)
                return

        self.lines.append(pad + head)
        for child in term.children:
            self.render(child, depth + 1)


def pretty_print(term: Term, config: Optional[PrintConfig] = None) -> str:
    """
    Render a Term as canonical termpose text.

    Args:
        term: Term to render
        config: Printer settings (defaults: tab indentation, 80 columns)

    Returns:
        Termpose text ending with a newline
    """
    printer = TermposePrinter(config or PrintConfig())
    printer.render(term)
    return "\n".join(printer.lines) + "\n"
