"""
termpose - indentation-driven tree notation with bidirectional schemas

Text is parsed into Term trees, Term trees print back as canonical text, and
checkers convert between Term trees and typed Python values in both directions.

Architecture:
- term: Term tree data structure
- parser / printer: text <-> Term
- checkers: combinator library for Term <-> value conversion
- converter: convenience and roundtrip validation on top of the above
"""

__version__ = "0.1.0"

from loguru import logger

# Library code stays quiet unless a logging session enables it (termpose.logger)
logger.disable("termpose")

from termpose.checkers import (
    Checker,
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
from termpose.config import PrintConfig, load_print_config
from termpose.converter import (
    RoundtripResult,
    deserialize,
    format_text,
    serialize,
    validate_roundtrip,
)
from termpose.exceptions import CheckError, ParseError, TermifyError, TermposeError
from termpose.parser import parse, parse_items
from termpose.printer import pretty_print
from termpose.term import Term

__all__ = [
    # Tree model
    "Term",
    # Text <-> Term
    "parse",
    "parse_items",
    "pretty_print",
    # Checker construction
    "Checker",
    "text_checker",
    "numeric_checker",
    "integer_checker",
    "bool_checker",
    "ensure_tag",
    "tagged_sequence",
    "sequence",
    "pair",
    "mapping",
    "tagged_mapping",
    "combine_trans",
    # Convenience and roundtrip validation
    "serialize",
    "deserialize",
    "format_text",
    "validate_roundtrip",
    "RoundtripResult",
    # Configuration
    "PrintConfig",
    "load_print_config",
    # Errors
    "TermposeError",
    "ParseError",
    "CheckError",
    "TermifyError",
]
