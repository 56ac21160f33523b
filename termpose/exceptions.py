"""Exceptions raised by the termpose parser and checkers, carrying source locations."""

from typing import Any, List, Optional


class TermposeError(Exception):
    """Base class for every error raised by termpose."""

    pass


class ParseError(TermposeError, ValueError):
    """
    Exception raised when termpose text cannot be parsed.

    Parsing never recovers: the first error aborts the whole parse.

    Attributes:
        message: Error description
        line: 1-based line number of the offending character
        column: 1-based column number of the offending character
        source_line: The raw text of the offending line, if available
    """

    def __init__(
        self,
        message: str,
        line: int,
        column: int,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.line = line
        self.column = column
        self.source_line = source_line

        parts = [f"line {line}, column {column}: {message}"]

        if source_line is not None:
            # Show the line with a caret under the offending column
            shown = source_line.expandtabs(1)
            parts.append(f"  {shown}")
            parts.append("  " + " " * max(column - 1, 0) + "^")

        super().__init__("\n".join(parts))


class CheckError(TermposeError, ValueError):
    """
    Exception raised when a Term does not match the shape a checker expects.

    Composite checkers prepend path segments while the error propagates, so the
    final message names where in the tree the mismatch happened.

    Attributes:
        message: Error description
        term: The Term that failed the check
        checker: Label of the checker that failed (see Checker.describe())
        expected: Short description of the expected shape
        path: Segments from the root to the failing Term (e.g. ['products[1]', 'cost'])
        cause: Underlying exception, if any
    """

    def __init__(
        self,
        message: str,
        term: Any = None,
        checker: Optional[str] = None,
        expected: Optional[str] = None,
        cause: Optional[Exception] = None,
    ):
        self.message = message
        self.term = term
        self.checker = checker
        self.expected = expected
        self.cause = cause
        self.path: List[str] = []
        super().__init__(message)

    @property
    def line(self) -> Optional[int]:
        return getattr(self.term, "line", None)

    @property
    def column(self) -> Optional[int]:
        return getattr(self.term, "column", None)

    def within(self, segment: str) -> "CheckError":
        """Record that the error happened inside `segment` and return self for re-raising."""
        self.path.insert(0, segment)
        return self

    def __str__(self) -> str:
        parts = []

        if self.path:
            parts.append(f"at {'/'.join(self.path)}: ")

        parts.append(self.message)

        if self.line is not None:
            parts.append(f" (line {self.line}, column {self.column})")

        if self.expected:
            parts.append(f"\nExpected: {self.expected}")

        if self.term is not None:
            found = str(self.term).rstrip("\n")
            # Truncate the offending term if too long
            found = found[:200] + "..." if len(found) > 200 else found
            parts.append(f"\nFound:\n{found}")

        if self.checker:
            parts.append(f"\nChecker: {self.checker}")

        return "".join(parts)


class TermifyError(TermposeError, ValueError):
    """
    Exception raised when a host value has no canonical Term representation.

    Attributes:
        message: Error description
        value: The host value that could not be termified
        checker: Label of the checker that refused it
    """

    def __init__(self, message: str, value: Any = None, checker: Optional[str] = None):
        self.message = message
        self.value = value
        self.checker = checker

        parts = [message]

        if checker:
            parts.append(f"Checker: {checker}")

        parts.append(f"Value: {value!r}")

        super().__init__("\n".join(parts))
