"""
Termpose Checkers

Bidirectional conversion rules between Terms and Python values. Every checker
offers:

- check(term): validate a Term and extract a Python value (raises CheckError)
- termify(value): rebuild the Term for a Python value (raises TermifyError)

For any value `v` a checker accepts, `checker.check(checker.termify(v)) == v`.

Checkers are built with the functions at the bottom of this module and compose
into schemas:

    product = combine_trans(
        Product,
        lambda p: (p.name, p.cost, p.description),
        text_checker(),
        ensure_tag("cost", numeric_checker()),
        ensure_tag("description", text_checker()),
    )
    catalog = tagged_sequence("products", product)

Checkers never mutate after construction and can be shared freely.
"""

import math
import re
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Generic, List, Optional, Sequence, Tuple, TypeVar

from termpose.exceptions import CheckError, TermifyError
from termpose.term import Term

T = TypeVar("T")

# Canonical numeric literal grammar, shared by check and termify
INTEGER_LITERAL = re.compile(r"-?(0|[1-9][0-9]*)")
DECIMAL_LITERAL = re.compile(r"-?(0|[1-9][0-9]*)(\.[0-9]+)?([eE][+-]?[0-9]+)?")

TRUE_WORDS = ("true", "yes", "⊤")
FALSE_WORDS = ("false", "no", "⟂")


class Checker(ABC, Generic[T]):
    """Base class for bidirectional Term <-> value rules."""

    # Tagged checkers are looked up by head inside combine_trans instead of by position
    tagged = False

    @abstractmethod
    def check(self, term: Term) -> T:
        """Validate `term` and extract its value."""

    @abstractmethod
    def termify(self, value: T) -> Term:
        """Build the Term representing `value`."""

    @abstractmethod
    def describe(self) -> str:
        """Short schema label used in error messages."""

    def _fail(self, message: str, term: Term, expected: Optional[str] = None, cause=None) -> CheckError:
        return CheckError(message, term=term, checker=self.describe(), expected=expected, cause=cause)

    def _refuse(self, message: str, value: Any) -> TermifyError:
        return TermifyError(message, value=value, checker=self.describe())

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.describe()}>"


class _AtomChecker(Checker[T]):
    """Shared shape check for checkers that only accept atoms."""

    def _atom_text(self, term: Term) -> str:
        if term.is_form:
            raise self._fail(
                f"expected an atom, found a form headed {term.head!r} with {len(term.children)} child(ren)",
                term,
                expected="atom",
            )
        return term.head


class TextChecker(_AtomChecker[str]):
    """Identity mapping between an atom's text and a str."""

    def check(self, term: Term) -> str:
        return self._atom_text(term)

    def termify(self, value: str) -> Term:
        if not isinstance(value, str):
            raise self._refuse(f"expected str, got {type(value).__name__}", value)
        return Term.atom(value)

    def describe(self) -> str:
        return "text"


class IntegerChecker(_AtomChecker[int]):
    """
    Atom <-> int, with optional inclusive bounds.

    Literal grammar: -?(0|[1-9][0-9]*). Leading '+', leading zeros, digit
    separators and exponents are rejected.
    """

    def __init__(self, minimum: Optional[int] = None, maximum: Optional[int] = None):
        if minimum is not None and maximum is not None and minimum > maximum:
            raise ValueError(f"minimum {minimum} is greater than maximum {maximum}")
        self.minimum = minimum
        self.maximum = maximum

    def _in_range(self, value: int) -> bool:
        if self.minimum is not None and value < self.minimum:
            return False
        if self.maximum is not None and value > self.maximum:
            return False
        return True

    def check(self, term: Term) -> int:
        text = self._atom_text(term)
        if not INTEGER_LITERAL.fullmatch(text):
            raise self._fail(f"{text!r} is not an integer literal", term, expected="integer literal")
        try:
            value = int(text)
        except ValueError as e:
            # Literal longer than the interpreter's int conversion limit
            raise self._fail(f"integer literal of {len(text)} digits is too long", term, cause=e) from e
        if not self._in_range(value):
            raise self._fail(f"{value} is out of range", term, expected=self.describe())
        return value

    def termify(self, value: int) -> Term:
        if isinstance(value, bool) or not isinstance(value, int):
            raise self._refuse(f"expected int, got {type(value).__name__}", value)
        if not self._in_range(value):
            raise self._refuse("value is out of range", value)
        try:
            text = str(value)
        except ValueError as e:
            raise self._refuse("integer has too many digits to write as a literal", value) from e
        return Term.atom(text)

    def describe(self) -> str:
        if self.minimum is None and self.maximum is None:
            return "integer"
        low = "" if self.minimum is None else str(self.minimum)
        high = "" if self.maximum is None else str(self.maximum)
        return f"integer[{low}..{high}]"


class DecimalChecker(_AtomChecker[float]):
    """
    Atom <-> float.

    Literal grammar: -?(0|[1-9][0-9]*)(\\.[0-9]+)?([eE][+-]?[0-9]+)?
    termify writes repr(float(value)), which always falls inside the grammar
    and reads back to the same float. Non-finite values have no literal.
    """

    def check(self, term: Term) -> float:
        text = self._atom_text(term)
        if not DECIMAL_LITERAL.fullmatch(text):
            raise self._fail(f"{text!r} is not a decimal literal", term, expected="decimal literal")
        value = float(text)
        if math.isinf(value):
            raise self._fail(f"{text!r} is out of range for a float", term, expected="finite decimal")
        return value

    def termify(self, value: float) -> Term:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise self._refuse(f"expected a number, got {type(value).__name__}", value)
        try:
            number = float(value)
        except OverflowError as e:
            raise self._refuse("integer too large to represent as a float", value) from e
        if not math.isfinite(number):
            raise self._refuse("non-finite numbers have no canonical literal", value)
        return Term.atom(repr(number))

    def describe(self) -> str:
        return "decimal"


class BoolChecker(_AtomChecker[bool]):
    """Atom <-> bool. Accepts true/yes/⊤ and false/no/⟂, writes true/false."""

    def check(self, term: Term) -> bool:
        text = self._atom_text(term)
        if text in TRUE_WORDS:
            return True
        if text in FALSE_WORDS:
            return False
        raise self._fail(
            f"expected a bool, found {text!r}",
            term,
            expected=" | ".join(TRUE_WORDS + FALSE_WORDS),
        )

    def termify(self, value: bool) -> Term:
        if not isinstance(value, bool):
            raise self._refuse(f"expected bool, got {type(value).__name__}", value)
        return Term.atom("true" if value else "false")

    def describe(self) -> str:
        return "bool"


class EnsureTag(Checker[T]):
    """
    A value stored under a tag: the first item of the checked Term that is a
    form headed `tag`, holding exactly one child.

    When several items carry the tag, the first one in source order wins.
    A Term that holds no such item but is itself the one-child form headed
    `tag` (what termify produces) is its own tagged item.
    """

    tagged = True

    def __init__(self, tag: str, inner: Checker[T]):
        self.tag = tag
        self.inner = inner

    def missing(self, term: Term) -> CheckError:
        return self._fail(f"missing tag {self.tag!r}", term, expected=f"a child written {self.tag}:<value>")

    def find(self, term: Term) -> Term:
        for item in term.contents:
            if item.is_form and item.head == self.tag:
                return item
        if term.head == self.tag and len(term.children) == 1:
            return term
        raise self.missing(term)

    def check_tagged(self, tagged_term: Term) -> T:
        """Check a form already known to be headed by this checker's tag."""
        if len(tagged_term.children) != 1:
            raise self._fail(
                f"tag {self.tag!r} must hold exactly one value, found {len(tagged_term.children)}",
                tagged_term,
                expected=f"{self.tag}:<value>",
            )
        try:
            return self.inner.check(tagged_term.children[0])
        except CheckError as e:
            raise e.within(self.tag)

    def check(self, term: Term) -> T:
        return self.check_tagged(self.find(term))

    def termify(self, value: T) -> Term:
        return Term(self.tag, (self.inner.termify(value),))

    def describe(self) -> str:
        return f"ensure_tag({self.tag!r}, {self.inner.describe()})"


class TaggedSequence(Checker[List[T]]):
    """
    A form headed `tag` whose children are all checked by `inner`.

    An atom equal to `tag` is the empty sequence. The empty tag gives an
    untagged sequence over the Term's contents, so `tricky list` is the
    list ['tricky', 'list'].
    """

    def __init__(self, tag: str, inner: Checker[T]):
        self.tag = tag
        self.inner = inner

    def _elements(self, term: Term) -> List[Term]:
        if not self.tag:
            return term.contents
        if term.head != self.tag:
            raise self._fail(
                f"expected head {self.tag!r}, found {term.head!r}",
                term,
                expected=f"a form headed {self.tag!r}",
            )
        return list(term.children)

    def check(self, term: Term) -> List[T]:
        values = []
        for i, element in enumerate(self._elements(term)):
            try:
                values.append(self.inner.check(element))
            except CheckError as e:
                raise e.within(f"{self.tag}[{i}]")
        return values

    def termify(self, value: Sequence[T]) -> Term:
        if isinstance(value, (str, bytes)) or not hasattr(value, "__iter__"):
            raise self._refuse(f"expected a sequence, got {type(value).__name__}", value)
        elements = [self.inner.termify(item) for item in value]
        if not self.tag:
            return Term.from_contents(elements)
        return Term(self.tag, tuple(elements))

    def describe(self) -> str:
        if not self.tag:
            return f"sequence({self.inner.describe()})"
        return f"tagged_sequence({self.tag!r}, {self.inner.describe()})"


class PairChecker(Checker[Tuple[Any, Any]]):
    """Exactly two positional items, e.g. `a:b` or `(a b)` -> ('a', 'b')."""

    def __init__(self, key: Checker, value: Checker):
        self.key = key
        self.value = value

    def check(self, term: Term) -> Tuple[Any, Any]:
        items = term.contents
        if len(items) != 2:
            raise self._fail(
                f"expected a pair of two items, found {len(items)}",
                term,
                expected="<key>:<value>",
            )
        try:
            key = self.key.check(items[0])
        except CheckError as e:
            raise e.within("key")
        try:
            value = self.value.check(items[1])
        except CheckError as e:
            raise e.within(str(key))
        return key, value

    def termify(self, value: Tuple[Any, Any]) -> Term:
        try:
            key, item = value
        except (TypeError, ValueError) as e:
            raise self._refuse("expected a (key, value) pair", value) from e
        return Term.from_contents([self.key.termify(key), self.value.termify(item)])

    def describe(self) -> str:
        return f"pair({self.key.describe()}, {self.value.describe()})"


class TaggedMapping(Checker[Dict[Any, Any]]):
    """
    A tagged sequence of pairs collected into a dict.

    Later duplicate keys overwrite earlier ones.
    """

    def __init__(self, tag: str, key: Checker, value: Checker):
        self.tag = tag
        self.pairs = TaggedSequence(tag, PairChecker(key, value))

    def check(self, term: Term) -> Dict[Any, Any]:
        return dict(self.pairs.check(term))

    def termify(self, value: Dict[Any, Any]) -> Term:
        if not isinstance(value, dict):
            raise self._refuse(f"expected dict, got {type(value).__name__}", value)
        return self.pairs.termify(list(value.items()))

    def describe(self) -> str:
        pair = self.pairs.inner
        if not self.tag:
            return f"mapping({pair.key.describe()}, {pair.value.describe()})"
        return f"tagged_mapping({self.tag!r}, {pair.key.describe()}, {pair.value.describe()})"


class CombineTrans(Checker[T]):
    """
    N-ary product: one checker per field of a record type.

    check splits the Term's contents between the sub-checkers. Each ensure_tag
    sub-checker claims the first unclaimed item carrying its tag; the remaining
    items go to the positional sub-checkers in order and must match their count
    exactly. Positional fields are checked first, left to right, then tagged
    fields in declaration order; the results are passed to `build`.

    termify calls `decompose` for the N field values and lays out positional
    results first, then tagged ones. A positional result that is a form headed
    by one of the record's tags is refused, since check would read it as that
    tagged field.
    """

    def __init__(
        self,
        build: Callable[..., T],
        decompose: Callable[[T], Sequence[Any]],
        checkers: Sequence[Checker],
    ):
        self.build = build
        self.decompose = decompose
        self.checkers = tuple(checkers)

    def _split(self, items: List[Term]) -> Tuple[Dict[int, Term], List[Term]]:
        """Return (tagged checker index -> claimed item, unclaimed items in order)."""
        claimed: Dict[int, Term] = {}
        taken = set()
        for index, checker in enumerate(self.checkers):
            if not checker.tagged:
                continue
            for position, item in enumerate(items):
                if position not in taken and item.is_form and item.head == checker.tag:
                    claimed[index] = item
                    taken.add(position)
                    break
        unclaimed = [item for position, item in enumerate(items) if position not in taken]
        return claimed, unclaimed

    def check(self, term: Term) -> T:
        claimed, unclaimed = self._split(term.contents)
        positional = [i for i, checker in enumerate(self.checkers) if not checker.tagged]

        if len(unclaimed) < len(positional):
            raise self._fail(
                f"expected {len(positional)} positional item(s), found {len(unclaimed)}",
                term,
                expected=self.describe(),
            )
        if len(unclaimed) > len(positional):
            extra = unclaimed[len(positional)]
            raise self._fail(
                f"unexpected extra item {extra.pretty_print().strip()!r} "
                f"({len(unclaimed) - len(positional)} more than the {len(positional)} positional item(s))",
                term,
                expected=self.describe(),
            )

        values: List[Any] = [None] * len(self.checkers)
        for index, item in zip(positional, unclaimed):
            values[index] = self.checkers[index].check(item)

        for index, checker in enumerate(self.checkers):
            if not checker.tagged:
                continue
            if index not in claimed:
                raise checker.missing(term)
            values[index] = checker.check_tagged(claimed[index])

        return self.build(*values)

    def termify(self, value: T) -> Term:
        fields = tuple(self.decompose(value))
        if len(fields) != len(self.checkers):
            raise self._refuse(
                f"decompose returned {len(fields)} field(s), expected {len(self.checkers)}",
                value,
            )
        tags = {checker.tag for checker in self.checkers if checker.tagged}
        positional = []
        tagged = []
        for checker, field_value in zip(self.checkers, fields):
            item = checker.termify(field_value)
            if checker.tagged:
                tagged.append(item)
                continue
            if item.is_form and item.head in tags:
                # check would hand this item to the tagged field instead
                raise self._refuse(
                    f"positional field {checker.describe()} termifies to a form headed {item.head!r}, "
                    f"which collides with a tagged field",
                    value,
                )
            positional.append(item)
        return Term.from_contents(positional + tagged)

    def describe(self) -> str:
        return f"combine_trans({', '.join(checker.describe() for checker in self.checkers)})"


# Construction functions


def text_checker() -> Checker[str]:
    """Atom text <-> str."""
    return TextChecker()


def numeric_checker() -> Checker[float]:
    """Decimal literal atom <-> float."""
    return DecimalChecker()


def integer_checker(minimum: Optional[int] = None, maximum: Optional[int] = None) -> Checker[int]:
    """Integer literal atom <-> int, optionally bounded (inclusive); minimum=0 for unsigned."""
    return IntegerChecker(minimum, maximum)


def bool_checker() -> Checker[bool]:
    """true/yes/⊤ and false/no/⟂ <-> bool."""
    return BoolChecker()


def ensure_tag(name: str, checker: Checker[T]) -> Checker[T]:
    """Value stored under `name:` among the checked Term's items (first match wins)."""
    return EnsureTag(name, checker)


def tagged_sequence(name: str, checker: Checker[T]) -> Checker[List[T]]:
    """Form headed `name` whose children each pass `checker`, as a list."""
    return TaggedSequence(name, checker)


def sequence(checker: Checker[T]) -> Checker[List[T]]:
    """Untagged list: a form with an empty head whose children each pass `checker`."""
    return TaggedSequence("", checker)


def pair(key: Checker, value: Checker) -> Checker[Tuple[Any, Any]]:
    """Two positional items as a tuple."""
    return PairChecker(key, value)


def mapping(key: Checker, value: Checker) -> Checker[Dict[Any, Any]]:
    """Untagged list of pairs as a dict, e.g. `a:b c:d`."""
    return TaggedMapping("", key, value)


def tagged_mapping(name: str, key: Checker, value: Checker) -> Checker[Dict[Any, Any]]:
    """Form headed `name` holding pairs, as a dict, e.g. `ob a:b c:d`."""
    return TaggedMapping(name, key, value)


def combine_trans(
    build: Callable[..., T],
    decompose: Callable[[T], Sequence[Any]],
    *checkers: Checker,
) -> Checker[T]:
    """
    Combine one checker per field into a checker for a whole record.

    Args:
        build: Called with the N checked field values, returns the record
        decompose: Returns the N field values of a record, in checker order
        *checkers: One checker per field; ensure_tag checkers are matched by tag,
            the others by position

    Returns:
        Checker for the record type

    Example:
        >>> point = combine_trans(lambda x, y: (x, y), lambda p: p, integer_checker(), integer_checker())
        >>> point.check(parse("3 4"))
        (3, 4)
    """
    return CombineTrans(build, decompose, checkers)
