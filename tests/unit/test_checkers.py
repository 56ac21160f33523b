"""
Unit tests for termpose checkers.

Tests the primitive checkers, the combinators in termpose.checkers, error
paths in CheckError and refusals in TermifyError.
"""

import sys
from dataclasses import dataclass

import pytest

from termpose.checkers import (
    bool_checker,
    combine_trans,
    ensure_tag,
    integer_checker,
    mapping,
    numeric_checker,
    pair,
    sequence,
    tagged_mapping,
    tagged_sequence,
    text_checker,
)
from termpose.exceptions import CheckError, TermifyError
from termpose.parser import parse
from termpose.term import Term

pytestmark = pytest.mark.unit

atom = Term.atom
form = Term.form


@dataclass
class Product:
    name: str
    cost: float
    description: str


def product_checker():
    return combine_trans(
        Product,
        lambda p: (p.name, p.cost, p.description),
        text_checker(),
        ensure_tag("cost", numeric_checker()),
        ensure_tag("description", text_checker()),
    )


class TestTextChecker:
    """Tests for text_checker."""

    def test_check_atom(self):
        """Test that an atom's text is returned unchanged."""
        assert text_checker().check(atom("bee's knee")) == "bee's knee"

    def test_check_rejects_form(self):
        """Test that a form is not text."""
        with pytest.raises(CheckError, match="expected an atom") as exc_info:
            text_checker().check(parse("a b"))

        assert exc_info.value.expected == "atom"
        assert exc_info.value.checker == "text"

    def test_termify(self):
        """Test that text becomes an atom."""
        assert text_checker().termify("x y") == atom("x y")

    def test_termify_rejects_non_text(self):
        """Test that a non-str value is refused."""
        with pytest.raises(TermifyError):
            text_checker().termify(5)


class TestNumericChecker:
    """Tests for numeric_checker (decimal literals as float)."""

    @pytest.mark.parametrize(
        "text, value",
        [("5", 5.0), ("9.50", 9.5), ("0", 0.0), ("-0.5", -0.5), ("1e3", 1000.0), ("2.5E-2", 0.025)],
    )
    def test_accepts_literals(self, text, value):
        """Test the accepted decimal literal forms."""
        assert numeric_checker().check(atom(text)) == value

    @pytest.mark.parametrize("text", ["abc", "+5", ".5", "5.", "05", "1_000", "inf", "nan", "0x10", ""])
    def test_rejects_non_literals(self, text):
        """Test that text outside the literal grammar is rejected."""
        with pytest.raises(CheckError, match="not a decimal literal"):
            numeric_checker().check(atom(text))

    def test_rejects_overflow(self):
        """Test that a literal too large for a float is rejected."""
        with pytest.raises(CheckError, match="out of range"):
            numeric_checker().check(atom("1e999"))

    @pytest.mark.parametrize("value, text", [(5, "5.0"), (9.5, "9.5"), (-0.25, "-0.25"), (1e22, "1e+22")])
    def test_termify(self, value, text):
        """Test the canonical literal written for a number."""
        assert numeric_checker().termify(value) == atom(text)

    @pytest.mark.parametrize("value", [0.1, 1 / 3, 1e-7, -123456.789, 2.0**60])
    def test_termify_then_check_returns_value(self, value):
        """Test that written literals read back to the same float."""
        checker = numeric_checker()

        assert checker.check(checker.termify(value)) == value

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_termify_rejects_non_finite(self, value):
        """Test that non-finite floats have no literal."""
        with pytest.raises(TermifyError, match="non-finite"):
            numeric_checker().termify(value)

    @pytest.mark.parametrize("value", [True, "5", None, 2**1100])
    def test_termify_rejects_other_values(self, value):
        """Test that booleans, text and huge ints are refused."""
        with pytest.raises(TermifyError):
            numeric_checker().termify(value)


class TestIntegerChecker:
    """Tests for integer_checker."""

    def test_accepts_integers(self):
        """Test plain and negative integer literals."""
        assert integer_checker().check(atom("42")) == 42
        assert integer_checker().check(atom("-7")) == -7

    @pytest.mark.parametrize("text", ["4.2", "1e3", "+1", "007"])
    def test_rejects_non_integers(self, text):
        """Test that decimal and decorated literals are rejected."""
        with pytest.raises(CheckError, match="not an integer literal"):
            integer_checker().check(atom(text))

    def test_bounds_on_check(self):
        """Test that values outside the bounds are rejected."""
        unsigned = integer_checker(minimum=0)

        assert unsigned.check(atom("0")) == 0
        with pytest.raises(CheckError, match="out of range"):
            unsigned.check(atom("-1"))

    def test_bounds_on_termify(self):
        """Test that termify refuses out-of-range values."""
        with pytest.raises(TermifyError, match="out of range"):
            integer_checker(maximum=10).termify(11)

    def test_termify_rejects_bool(self):
        """Test that bool is not accepted as an int."""
        with pytest.raises(TermifyError):
            integer_checker().termify(True)

    def test_invalid_bounds(self):
        """Test that minimum above maximum is a configuration error."""
        with pytest.raises(ValueError):
            integer_checker(minimum=5, maximum=1)

    @pytest.mark.skipif(not hasattr(sys, "get_int_max_str_digits"), reason="no int string conversion limit")
    def test_check_rejects_overlong_literal(self):
        """Test that a literal past the int conversion limit is a CheckError."""
        with pytest.raises(CheckError, match="too long"):
            integer_checker().check(atom("1" * 5000))

    @pytest.mark.skipif(not hasattr(sys, "get_int_max_str_digits"), reason="no int string conversion limit")
    def test_termify_rejects_overlong_value(self):
        """Test that an int too long to write is refused."""
        with pytest.raises(TermifyError, match="too many digits"):
            integer_checker().termify(10**5000)

    def test_describe(self):
        """Test labels with and without bounds."""
        assert integer_checker().describe() == "integer"
        assert integer_checker(0, 255).describe() == "integer[0..255]"
        assert integer_checker(minimum=0).describe() == "integer[0..]"


class TestBoolChecker:
    """Tests for bool_checker."""

    @pytest.mark.parametrize("text", ["true", "yes", "⊤"])
    def test_true_words(self, text):
        """Test the spellings of true."""
        assert bool_checker().check(atom(text)) is True

    @pytest.mark.parametrize("text", ["false", "no", "⟂"])
    def test_false_words(self, text):
        """Test the spellings of false."""
        assert bool_checker().check(atom(text)) is False

    def test_rejects_other_words(self):
        """Test that anything else is an error."""
        with pytest.raises(CheckError, match="expected a bool"):
            bool_checker().check(atom("maybe"))

    def test_termify(self):
        """Test the canonical spellings."""
        assert bool_checker().termify(True) == atom("true")
        assert bool_checker().termify(False) == atom("false")


class TestEnsureTag:
    """Tests for ensure_tag."""

    def test_finds_tag_among_children(self):
        """Test that the tagged value is extracted."""
        assert ensure_tag("cost", numeric_checker()).check(parse("hammer cost:5")) == 5.0

    def test_missing_tag(self):
        """Test that a missing tag names the tag."""
        with pytest.raises(CheckError, match="missing tag 'cost'"):
            ensure_tag("cost", numeric_checker()).check(parse("hammer weight:5"))

    def test_atom_with_tag_text_is_not_a_tag(self):
        """Test that only forms count as tags."""
        with pytest.raises(CheckError, match="missing tag"):
            ensure_tag("x", text_checker()).check(parse("r x"))

    def test_first_match_wins(self):
        """Test that duplicate tags always resolve to the first in source order."""
        checker = ensure_tag("x", text_checker())
        term = parse("r x:a x:b")

        assert [checker.check(term) for _ in range(3)] == ["a", "a", "a"]

    def test_tag_must_hold_one_value(self):
        """Test that a tag with several children is rejected."""
        with pytest.raises(CheckError, match="exactly one value"):
            ensure_tag("x", text_checker()).check(parse("r\n\tx a b"))

    def test_inner_error_gets_tag_in_path(self):
        """Test that errors below the tag are located under it."""
        with pytest.raises(CheckError) as exc_info:
            ensure_tag("cost", numeric_checker()).check(parse("hammer cost:five"))

        assert exc_info.value.path == ["cost"]

    def test_termify(self):
        """Test that the value is wrapped in a one-child form."""
        assert ensure_tag("cost", numeric_checker()).termify(5) == form("cost", atom("5.0"))

    def test_check_reads_own_termify(self):
        """Test that a standalone tagged value reads back from its own Term."""
        checker = ensure_tag("cost", numeric_checker())

        assert checker.check(checker.termify(5.0)) == 5.0
        assert checker.check(parse("cost:5")) == 5.0

    def test_describe(self):
        """Test the label used in messages."""
        assert ensure_tag("cost", numeric_checker()).describe() == "ensure_tag('cost', decimal)"


class TestTaggedSequence:
    """Tests for tagged_sequence and sequence."""

    def test_checks_every_child(self):
        """Test that each child passes through the inner checker, in order."""
        assert tagged_sequence("words", text_checker()).check(parse("words a b c")) == ["a", "b", "c"]

    def test_atom_with_tag_is_empty(self):
        """Test that the bare tag is the empty list."""
        assert tagged_sequence("words", text_checker()).check(parse("words")) == []

    def test_wrong_head(self):
        """Test that a different head is rejected."""
        with pytest.raises(CheckError, match="expected head 'words', found 'names'"):
            tagged_sequence("words", text_checker()).check(parse("names a"))

    def test_error_path_has_index(self):
        """Test that a failing element is located by tag and index."""
        with pytest.raises(CheckError) as exc_info:
            tagged_sequence("nums", integer_checker()).check(parse("nums 1 2 x"))

        assert exc_info.value.path == ["nums[2]"]

    def test_termify_empty(self):
        """Test that the empty list termifies to the bare tag."""
        assert tagged_sequence("words", text_checker()).termify([]) == atom("words")

    def test_termify_rejects_text(self):
        """Test that a str is not treated as a sequence of characters."""
        with pytest.raises(TermifyError):
            tagged_sequence("words", text_checker()).termify("abc")

    def test_untagged_sequence(self):
        """Test sequence() on a form with an empty head."""
        checker = sequence(integer_checker())

        assert checker.check(parse('"" 1 2 3')) == [1, 2, 3]
        assert checker.termify([1, 2]) == form("1", atom("2"))
        assert checker.check(checker.termify([1, 2])) == [1, 2]

    def test_untagged_sequence_reads_contents(self):
        """Test that a plain line of words is a list of its items, head included."""
        checker = sequence(text_checker())

        assert checker.check(parse("tricky list")) == ["tricky", "list"]
        assert checker.check(parse("alone")) == ["alone"]
        assert checker.termify(["tricky", "list"]) == parse("tricky list")

    @pytest.mark.parametrize("value", [[], [""], ["", "a"], ["a"], ["a", "", "b"]])
    def test_untagged_sequence_termify_then_check(self, value):
        """Test that empty texts and single items survive the contents layout."""
        checker = sequence(text_checker())

        assert checker.check(parse(checker.termify(value).pretty_print())) == value

    def test_nested_sequences(self):
        """Test lists of lists, including an empty inner list."""
        checker = sequence(sequence(text_checker()))
        value = [["tricky", "list"], [], ["parse"]]

        assert checker.check(parse(checker.termify(value).pretty_print())) == value


class TestPairAndMapping:
    """Tests for pair, mapping and tagged_mapping."""

    def test_pair_from_colon(self):
        """Test that a:1 is the pair ('a', 1)."""
        checker = pair(text_checker(), integer_checker())

        assert checker.check(parse("a:1")) == ("a", 1)
        assert checker.termify(("a", 1)) == parse("a:1")

    def test_pair_from_group(self):
        """Test that two positional items also form a pair."""
        assert pair(text_checker(), text_checker()).check(parse("a b")) == ("a", "b")

    def test_pair_needs_two_items(self):
        """Test that three items are not a pair."""
        with pytest.raises(CheckError, match="pair of two items"):
            pair(text_checker(), text_checker()).check(parse("a b c"))

    def test_pair_termify_rejects_non_pairs(self):
        """Test that values not unpacking to two items are refused."""
        with pytest.raises(TermifyError):
            pair(text_checker(), text_checker()).termify("abc")

    def test_untagged_mapping(self):
        """Test a line of tag pairs as a dict."""
        checker = mapping(text_checker(), text_checker())

        assert checker.check(parse("a:b c:d")) == {"a": "b", "c": "d"}

    def test_untagged_mapping_rejects_tagged_form(self):
        """Test that a head other than the empty one is rejected."""
        with pytest.raises(CheckError):
            mapping(text_checker(), text_checker()).check(parse("ob a:b c:d"))

    def test_tagged_mapping(self):
        """Test a tagged form of pairs as a dict."""
        checker = tagged_mapping("ob", text_checker(), text_checker())

        assert checker.check(parse("ob a:b c:d d:e e:f")) == {"a": "b", "c": "d", "d": "e", "e": "f"}

    def test_tagged_mapping_rejects_untagged_form(self):
        """Test that the tag is required."""
        with pytest.raises(CheckError):
            tagged_mapping("ob", text_checker(), text_checker()).check(parse("a:b c:d"))

    def test_mapping_value_error_path(self):
        """Test that a failing value is located by index and key."""
        checker = tagged_mapping("ob", text_checker(), integer_checker())

        with pytest.raises(CheckError) as exc_info:
            checker.check(parse("ob a:1 b:x"))

        assert exc_info.value.path == ["ob[1]", "b"]

    def test_mapping_termify_then_check(self):
        """Test that a dict survives termify, print and check."""
        checker = tagged_mapping("ob", text_checker(), integer_checker())
        value = {"a": 1, "key with space": 2}

        assert checker.check(parse(checker.termify(value).pretty_print())) == value


class TestCombineTrans:
    """Tests for combine_trans records."""

    def test_positional_and_tagged_fields(self):
        """Test a record with a positional name and two tagged fields."""
        term = parse('hammer cost:5 description:"premium hammer"')

        assert product_checker().check(term) == Product("hammer", 5.0, "premium hammer")

    def test_tagged_fields_in_any_order(self):
        """Test that tagged fields are found regardless of position."""
        term = parse("hammer description:x cost:5")

        assert product_checker().check(term) == Product("hammer", 5.0, "x")

    def test_too_few_positional_items(self):
        """Test that missing positional items are an arity error."""
        triple = combine_trans(lambda *v: v, lambda v: v, text_checker(), text_checker(), text_checker())

        with pytest.raises(CheckError, match="expected 3 positional item\\(s\\), found 2"):
            triple.check(parse("a b"))

    def test_too_many_positional_items(self):
        """Test that leftover items are an arity error."""
        triple = combine_trans(lambda *v: v, lambda v: v, text_checker(), text_checker(), text_checker())

        with pytest.raises(CheckError, match="unexpected extra item 'd'"):
            triple.check(parse("a b c d"))

        assert triple.check(parse("a b c")) == ("a", "b", "c")

    def test_missing_tagged_field(self):
        """Test that a missing tag is reported by name."""
        with pytest.raises(CheckError, match="missing tag 'description'"):
            product_checker().check(parse("hammer cost:5"))

    def test_duplicate_tag_leaves_extra_item(self):
        """Test that a second occurrence of a tag is not silently dropped."""
        checker = combine_trans(lambda n, x: (n, x), lambda v: v, text_checker(), ensure_tag("x", text_checker()))

        with pytest.raises(CheckError, match="unexpected extra item"):
            checker.check(parse("r x:a x:b"))

    def test_repeated_tag_checkers_claim_in_order(self):
        """Test that two checkers for the same tag take successive occurrences."""
        checker = combine_trans(
            lambda a, b: (a, b),
            lambda v: v,
            ensure_tag("x", text_checker()),
            ensure_tag("x", text_checker()),
        )

        assert checker.check(parse('"" x:a x:b')) == ("a", "b")

    def test_missing_second_occurrence(self):
        """Test that a tag claimed once cannot satisfy a second checker."""
        checker = combine_trans(
            lambda n, a, b: (n, a, b),
            lambda v: v,
            text_checker(),
            ensure_tag("x", text_checker()),
            ensure_tag("x", text_checker()),
        )

        with pytest.raises(CheckError, match="missing tag 'x'"):
            checker.check(parse("r x:a"))

    def test_termify_layout(self):
        """Test that positional fields come before tagged ones."""
        term = product_checker().termify(Product("hammer", 5, "premium hammer"))

        assert term == form(
            "hammer",
            form("cost", atom("5.0")),
            form("description", atom("premium hammer")),
        )

    def test_termify_wrong_field_count(self):
        """Test that decompose must return one value per checker."""
        checker = combine_trans(lambda a, b: (a, b), lambda v: v[:1], text_checker(), text_checker())

        with pytest.raises(TermifyError, match="decompose returned 1 field"):
            checker.termify(("a", "b"))

    def test_termify_refuses_positional_tag_collision(self):
        """Test that a positional field may not termify into a tagged field's slot."""
        checker = combine_trans(
            lambda p, k: (p, k),
            lambda v: v,
            pair(text_checker(), text_checker()),
            ensure_tag("k", text_checker()),
        )

        with pytest.raises(TermifyError, match="collides with a tagged field"):
            checker.termify((("k", "v"), "w"))

        value = (("a", "v"), "w")
        assert checker.check(checker.termify(value)) == value

    def test_error_string_shows_path_and_location(self):
        """Test the rendered error for a bad field deep in a catalog."""
        catalog = tagged_sequence("products", product_checker())
        term = parse("products\n\thammer cost:five description:x")

        with pytest.raises(CheckError) as exc_info:
            catalog.check(term)

        error = exc_info.value
        assert error.path == ["products[0]", "cost"]
        assert (error.line, error.column) == (2, 14)
        assert str(error).startswith("at products[0]/cost: 'five' is not a decimal literal (line 2, column 14)")
        assert "Checker: decimal" in str(error)
