"""
Termpose <-> Python Converter

Convenience functions tying the parser, printer and checkers together.

This module exports:
- Convenience functions: serialize, deserialize, format_text, format_file
- Roundtrip validation: validate_roundtrip (in memory), validate_roundtrip_file
  (with artifacts), run_roundtrip (with a logging session)
"""

import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional

from dotenv import load_dotenv

from termpose.checkers import Checker
from termpose.config import PrintConfig
from termpose.exceptions import CheckError, ParseError, TermifyError
from termpose.logger import _log_debug, _log_info, end_session, log_roundtrip_result, start_session
from termpose.parser import parse, parse_items
from termpose.printer import pretty_print
from termpose.term import Term
from termpose.utils.text_processing import get_meaningful_diff
from termpose.utils.timestamp import now

load_dotenv()
LOGS_PATH = Path(os.getenv("LOGS_PATH", "outs/logs"))


@dataclass
class RoundtripResult:
    """Result from validate_roundtrip()."""

    success: bool
    error: Optional[str] = None
    # Lines changed between the input and its canonical form (informational)
    format_diffs: Optional[int] = None
    # Lines changed when printing the re-parsed canonical text again (must be 0)
    text_diffs: Optional[int] = None
    # parse(print(tree)) == tree
    tree_stable: Optional[bool] = None
    # check(termify(check(tree))) == check(tree), None when no checker was given
    value_stable: Optional[bool] = None
    canonical: Optional[str] = None
    time_ms: float = 0.0


def deserialize(text: str, checker: Checker) -> Any:
    """
    Parse termpose text and check it into a Python value.

    Raises:
        ParseError: If the text is malformed
        CheckError: If the tree does not match the checker
    """
    return checker.check(parse(text))


def serialize(value: Any, checker: Checker, config: Optional[PrintConfig] = None) -> str:
    """
    Termify a Python value and print it as canonical termpose text.

    Raises:
        TermifyError: If the value has no Term representation
    """
    return pretty_print(checker.termify(value), config)


def format_items(items: List[Term], config: Optional[PrintConfig] = None) -> str:
    """Print top-level Terms one after another, each starting at column 1."""
    return "".join(pretty_print(item, config) for item in items)


def format_text(text: str, config: Optional[PrintConfig] = None) -> str:
    """
    Rewrite termpose text in canonical form, keeping every top-level Term separate.

    Raises:
        ParseError: If the text is malformed
    """
    return format_items(parse_items(text), config)


def format_file(
    input_path: Path, output_path: Optional[Path] = None, config: Optional[PrintConfig] = None
) -> str:
    """
    Rewrite a termpose file in canonical form.

    Args:
        input_path: Path to the termpose file
        output_path: Optional path to write the canonical text (may equal input_path)
        config: Printer settings

    Returns:
        Canonical text
    """
    canonical = format_text(input_path.read_text(encoding="utf-8"), config)

    if output_path:
        output_path.write_text(canonical, encoding="utf-8")

    return canonical


def validate_roundtrip(
    text: str, checker: Optional[Checker] = None, config: Optional[PrintConfig] = None
) -> RoundtripResult:
    """
    Validate that text survives the parse/print (and optionally check/termify) roundtrip.

    Steps:
    1. Parse input → Terms
    2. Print Terms → canonical text
    3. Re-parse canonical text → compare Terms
    4. Print again → compare canonical texts
    5. With a checker: check → termify → check, compare values

    Args:
        text: Termpose text to validate
        checker: Optional checker applied to the parsed root Term
        config: Printer settings

    Returns:
        RoundtripResult; failures of individual steps are reported in `error`
    """
    start_time = time.time()
    result = RoundtripResult(success=False)

    try:
        # Step 1: Parse input
        try:
            items = parse_items(text)
        except ParseError as e:
            result.error = f"Parse error: {e}"
            return result

        # Step 2: Print canonical form
        canonical = format_items(items, config)
        result.canonical = canonical
        _, result.format_diffs = get_meaningful_diff(
            text, canonical, "input", "canonical", ignore_blank_lines=True
        )

        # Step 3: Re-parse canonical text
        try:
            reparsed = parse_items(canonical)
        except ParseError as e:
            result.error = f"Re-parse error: {e}"
            return result
        result.tree_stable = reparsed == items

        # Step 4: Print again
        _, result.text_diffs = get_meaningful_diff(
            canonical, format_items(reparsed, config), "canonical", "reprinted"
        )

        # Step 5: Checker roundtrip
        if checker is not None:
            root = parse(text)
            try:
                value = checker.check(root)
            except CheckError as e:
                result.error = f"Check error: {e}"
                return result
            try:
                rebuilt = checker.termify(value)
            except TermifyError as e:
                result.error = f"Termify error: {e}"
                return result
            try:
                result.value_stable = checker.check(parse(pretty_print(rebuilt, config))) == value
            except (ParseError, CheckError) as e:
                result.error = f"Re-check error: {e}"
                return result

        result.success = (
            result.tree_stable
            and result.text_diffs == 0
            and result.value_stable is not False
        )

    finally:
        result.time_ms = (time.time() - start_time) * 1000

    return result


def validate_roundtrip_file(
    input_file: Path,
    work_dir: Path,
    checker: Optional[Checker] = None,
    config: Optional[PrintConfig] = None,
) -> RoundtripResult:
    """
    Validate a termpose file and keep the artifacts in `work_dir`.

    Writes `<stem>_canonical.term` and, when formatting changed the input,
    `format.diff`.
    """
    work_dir.mkdir(exist_ok=True, parents=True)
    text = input_file.read_text(encoding="utf-8")

    result = validate_roundtrip(text, checker, config)

    if result.canonical is not None:
        canonical_file = work_dir / f"{input_file.stem}_canonical.term"
        canonical_file.write_text(result.canonical, encoding="utf-8")
        _log_debug(f"Canonical text written to {canonical_file}")

        diff_lines, num_diffs = get_meaningful_diff(
            text, result.canonical, input_file.name, canonical_file.name, ignore_blank_lines=True
        )
        if num_diffs > 0:
            (work_dir / "format.diff").write_text("\n".join(diff_lines), encoding="utf-8")
            _log_info(f"Formatting changed {num_diffs} line(s); see format.diff")

    return result


def run_roundtrip(
    input_file: Path,
    checker: Optional[Checker] = None,
    config: Optional[PrintConfig] = None,
    log_dir: Optional[Path] = None,
) -> RoundtripResult:
    """
    Validate a termpose file inside a logging session.

    Args:
        input_file: Termpose file to validate
        checker: Optional checker applied to the parsed root Term
        config: Printer settings
        log_dir: Session directory (default: LOGS_PATH/roundtrip_<timestamp>)

    Returns:
        RoundtripResult
    """
    start_time = time.time()

    config = config or PrintConfig()
    log_dir = log_dir or LOGS_PATH / f"roundtrip_{now()}"
    start_session(log_dir, input_file, config)

    try:
        result = validate_roundtrip_file(input_file, log_dir, checker, config)
        log_roundtrip_result(input_file.name, result, time.time() - start_time)
    finally:
        end_session()
    return result
