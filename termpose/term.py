"""
Term Data Structure

Defines the Term tree that termpose text parses into and that checkers build.
A Term is a head text plus an ordered tuple of child Terms:

- atom: a Term with no children (bare word, number literal, quoted text, block quote)
- form: a Term with one or more children

Terms are immutable once built and each Term owns its children exclusively.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple


@dataclass(frozen=True)
class Term:
    """
    Node of a termpose tree.

    Attributes:
        head: Head text (possibly empty)
        children: Ordered child Terms; empty for atoms
        line: 1-based source line where the Term started (None when synthesized)
        column: 1-based source column where the Term started (None when synthesized)

    Source positions only serve diagnostics and are ignored by equality and hashing.
    """

    head: str
    children: Tuple["Term", ...] = ()
    line: Optional[int] = field(default=None, compare=False, repr=False)
    column: Optional[int] = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        if not isinstance(self.head, str):
            raise TypeError(f"Term head must be str, got {type(self.head).__name__}")
        if not isinstance(self.children, tuple):
            object.__setattr__(self, "children", tuple(self.children))
        for child in self.children:
            if not isinstance(child, Term):
                raise TypeError(f"Term children must be Terms, got {type(child).__name__}")

    @classmethod
    def atom(cls, text: str, line: Optional[int] = None, column: Optional[int] = None) -> "Term":
        """Create a leaf Term holding `text`."""
        return cls(text, (), line, column)

    @classmethod
    def form(cls, head: str, *children: "Term") -> "Term":
        """
        Create a Term with a head and positional children.

        Example:
            >>> Term.form("cost", Term.atom("5"))
            Term(head='cost', children=(Term(head='5', children=()),))
        """
        return cls(head, tuple(children))

    @classmethod
    def from_contents(cls, items: Iterable["Term"]) -> "Term":
        """
        Build a Term from a positional item list (inverse of `contents`).

        If the first item is an atom with non-empty text it becomes the head,
        otherwise every item becomes a child of a Term with an empty head.

        Example:
            >>> Term.from_contents([Term.atom("a"), Term.atom("b")]) == Term.form("a", Term.atom("b"))
            True
        """
        items = list(items)
        if items and items[0].is_atom and items[0].head:
            return cls(items[0].head, tuple(items[1:]))
        return cls("", tuple(items))

    @property
    def is_atom(self) -> bool:
        return not self.children

    @property
    def is_form(self) -> bool:
        return bool(self.children)

    @property
    def contents(self) -> List["Term"]:
        """
        Positional item view: the head as a leading atom (when non-empty), then the children.

        `Term.from_contents(items).contents == items` holds for every item list.
        `Term.from_contents(t.contents) == t` holds unless `t` has an empty head
        and a first child that is an atom with non-empty text: `"" x` reads
        back as the atom `x`.
        """
        if not self.head:
            return list(self.children)
        return [Term.atom(self.head, self.line, self.column), *self.children]

    def find_children(self, head: str) -> List["Term"]:
        """Return the child forms whose head equals `head`, in order."""
        return [child for child in self.children if child.is_form and child.head == head]

    def line_and_column(self) -> Tuple[Optional[int], Optional[int]]:
        return self.line, self.column

    def pretty_print(self, config=None) -> str:
        """Render this Term as canonical termpose text (see termpose.printer)."""
        # Import here to avoid circular dependency
        from termpose.printer import pretty_print

        return pretty_print(self, config)

    def __str__(self) -> str:
        return self.pretty_print()
