"""
Termpose Parser

Converts termpose text into a Term tree.

Structure is indentation based: a line indented deeper than the previous
non-blank line adds children to that line's Term. On one line, whitespace
separated items become siblings; the first plain item is the head.

Syntax summary:
    products                     form headed "products"
        hammer cost:5            "cost:5" is sugar for a one-child form
        "bee's knee" cost:9.50   quotes allow whitespace and structural characters
        twine description"       a trailing quote opens a block quote...
            make a text adventure    ...holding the deeper-indented lines verbatim
        (a b) c                  parentheses group items on a single line
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional

from termpose.exceptions import ParseError
from termpose.logger import _log_debug
from termpose.term import Term

WHITESPACE = " \t"
# Characters that end a bare word
DELIMITERS = WHITESPACE + '():"'
ESCAPES = {"n": "\n", "t": "\t", "r": "\r"}


def _is_blank(line: str) -> bool:
    return line.strip(WHITESPACE) == ""


def _leading_whitespace(line: str) -> str:
    return line[: len(line) - len(line.lstrip(WHITESPACE))]


@dataclass
class _LineNode:
    """A non-blank line waiting for the children indented beneath it."""

    items: List[Term]
    line: int
    column: int
    children: List["_LineNode"] = field(default_factory=list)


def _assemble(items: List[Term], children: List[Term], line: int, column: int) -> Term:
    """
    Combine a line's items and its indented children into one Term.

    A lone item without children stands for itself. Otherwise a leading atom
    becomes the head; a leading form forces an empty head holding every item.
    """
    if len(items) == 1 and not children:
        return items[0]
    if items and items[0].is_atom:
        return Term(items[0].head, tuple(items[1:]) + tuple(children), line, column)
    return Term("", tuple(items) + tuple(children), line, column)


class TermposeParser:
    """
    Single-use parser over a complete text buffer.

    Lines are scanned once; block quotes pull the lines that belong to them
    while the opening line is still being read.
    """

    def __init__(self, text: str):
        self.lines = [raw[:-1] if raw.endswith("\r") else raw for raw in text.split("\n")]
        self.index = 0
        # Current line state
        self.text = ""
        self.pos = 0
        self.line_no = 0
        self.indent = ""

    # Error helpers

    def _error(self, message: str, column: Optional[int] = None, line_no: Optional[int] = None):
        line_no = line_no or self.line_no
        if column is None:
            column = self.pos + 1
        source_line = self.lines[line_no - 1] if 0 < line_no <= len(self.lines) else None
        return ParseError(message, line_no, column, source_line)

    # Entry point

    def parse_items(self) -> List[Term]:
        """
        Parse the whole buffer and return its top-level Terms.

        Raises:
            ParseError: On malformed indentation, quoting, structural characters,
                or when the text holds no Term at all
        """
        roots: List[_LineNode] = []
        stack: List[tuple] = []  # (indent, node) for every open level

        while self.index < len(self.lines):
            raw = self.lines[self.index]
            self.index += 1
            if _is_blank(raw):
                continue

            indent = _leading_whitespace(raw)
            node = self._read_line(raw, self.index, indent)

            if not stack:
                stack.append((indent, node))
                roots.append(node)
                continue

            top_indent, top_node = stack[-1]
            if indent == top_indent:
                stack[-1] = (indent, node)
            elif indent.startswith(top_indent):
                top_node.children.append(node)
                stack.append((indent, node))
                continue
            elif top_indent.startswith(indent):
                while stack and len(stack[-1][0]) > len(indent):
                    stack.pop()
                if not stack or stack[-1][0] != indent:
                    raise self._error(
                        "dedent to an indentation level that was never opened",
                        column=len(indent) + 1,
                    )
                stack[-1] = (indent, node)
            else:
                raise self._error(
                    "inconsistent indentation (tabs and spaces mixed differently than the enclosing lines)",
                    column=len(indent) + 1,
                )

            # Sibling of the level we landed on
            if len(stack) >= 2:
                stack[-2][1].children.append(node)
            else:
                roots.append(node)

        if not roots:
            raise ParseError("empty input: expected at least one term", 1, 1)

        terms = [self._build(node) for node in roots]
        _log_debug(f"Parsed {len(terms)} top-level term(s) from {len(self.lines)} line(s)")
        return terms

    def _build(self, node: _LineNode) -> Term:
        children = [self._build(child) for child in node.children]
        return _assemble(node.items, children, node.line, node.column)

    # Line level

    def _read_line(self, raw: str, line_no: int, indent: str) -> _LineNode:
        self.text = raw
        self.pos = len(indent)
        self.line_no = line_no
        self.indent = indent

        items = self._read_items(depth=0)
        return _LineNode(items=items, line=line_no, column=len(indent) + 1)

    def _peek(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def _skip_whitespace(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos] in WHITESPACE:
            self.pos += 1

    def _read_items(self, depth: int) -> List[Term]:
        """Read items until end of line (depth 0) or the closing parenthesis."""
        items = []
        open_column = self.pos
        while True:
            self._skip_whitespace()
            char = self._peek()
            if char == "":
                if depth > 0:
                    raise self._error("unterminated parenthesis", column=open_column)
                return items
            if char == ")":
                if depth == 0:
                    raise self._error("unexpected ')' without a matching '('")
                self.pos += 1
                return items
            items.append(self._read_item(depth))
            following = self._peek()
            if following not in ("", ")") and following not in WHITESPACE:
                raise self._error(f"unexpected {following!r} directly after an item; separate items with whitespace")

    def _read_item(self, depth: int) -> Term:
        """Read one item, folding `left:right` chains into nested one-child forms."""
        column = self.pos + 1
        char = self._peek()

        if char == "(":
            self.pos += 1
            inner = self._read_items(depth + 1)
            if not inner:
                left = Term.atom("", self.line_no, column)
            else:
                left = _assemble(inner, [], self.line_no, column)
        elif char == '"':
            left = self._read_quote(depth, column)
        elif char == ":":
            raise self._error("unexpected ':' with nothing on its left")
        else:
            left = Term.atom(self._read_bare(), self.line_no, column)
            if self._peek() == '"':
                # A quote right after a word acts as an implicit colon
                value = self._read_quote(depth, self.pos + 1)
                return Term(left.head, (value,), self.line_no, column)

        if self._peek() != ":":
            return left

        if not left.is_atom:
            raise self._error("':' must follow a plain word or quoted text, not a form")
        self.pos += 1
        after = self._peek()
        if after == "" or after in WHITESPACE or after == ")":
            raise self._error("expected a value after ':'")
        value = self._read_item(depth)
        return Term(left.head, (value,), self.line_no, column)

    def _read_escape(self) -> str:
        # self.pos is on the backslash
        if self.pos + 1 >= len(self.text):
            raise self._error("dangling '\\' at end of line")
        escaped = self.text[self.pos + 1]
        self.pos += 2
        return ESCAPES.get(escaped, escaped)

    def _read_bare(self) -> str:
        chars = []
        while self.pos < len(self.text):
            char = self.text[self.pos]
            if char == "\\":
                chars.append(self._read_escape())
            elif char in DELIMITERS:
                break
            else:
                chars.append(char)
                self.pos += 1
        return "".join(chars)

    def _read_quote(self, depth: int, column: int) -> Term:
        """Read an inline quote, or a block quote when the quote ends the line."""
        # self.pos is on the opening quote
        if _is_blank(self.text[self.pos + 1 :]):
            if depth > 0:
                raise self._error("a block quote cannot be opened inside parentheses")
            self.pos = len(self.text)
            return Term.atom(self._read_block(column), self.line_no, column)

        self.pos += 1
        chars = []
        while self.pos < len(self.text):
            char = self.text[self.pos]
            if char == "\\":
                chars.append(self._read_escape())
            elif char == '"':
                self.pos += 1
                return Term.atom("".join(chars), self.line_no, column)
            else:
                chars.append(char)
                self.pos += 1
        raise self._error("unterminated quote", column=column)

    def _read_block(self, column: int) -> str:
        """
        Consume the lines indented strictly deeper than the opening line.

        Blank lines inside the block are kept as empty lines, trailing ones are
        dropped, and the longest common leading whitespace is stripped.
        """
        opener_line = self.line_no
        content: List[str] = []
        while self.index < len(self.lines):
            raw = self.lines[self.index]
            if _is_blank(raw):
                content.append("")
                self.index += 1
                continue
            indent = _leading_whitespace(raw)
            if len(indent) > len(self.indent) and indent.startswith(self.indent):
                content.append(raw)
                self.index += 1
            else:
                break

        while content and content[-1] == "":
            content.pop()
        if not content:
            raise self._error(
                "unterminated block quote: no lines are indented beneath it",
                column=column,
                line_no=opener_line,
            )

        prefix = os.path.commonprefix([_leading_whitespace(line) for line in content if line])
        return "\n".join(line[len(prefix) :] if line else "" for line in content)


def parse_items(text: str) -> List[Term]:
    """
    Parse termpose text into its list of top-level Terms.

    Args:
        text: Complete termpose text

    Returns:
        Top-level Terms in source order

    Raises:
        ParseError: If the text is malformed or holds no Term
    """
    return TermposeParser(text).parse_items()


def parse(text: str) -> Term:
    """
    Parse termpose text into a single root Term.

    A text holding exactly one top-level Term returns that Term; several
    top-level Terms are gathered under a form with an empty head.

    Args:
        text: Complete termpose text

    Returns:
        Root Term

    Raises:
        ParseError: If the text is malformed or holds no Term

    Example:
        >>> parse("hammer cost:5") == Term.form("hammer", Term.form("cost", Term.atom("5")))
        True
    """
    items = parse_items(text)
    if len(items) == 1:
        return items[0]
    first = items[0]
    return Term("", tuple(items), first.line, first.column)
