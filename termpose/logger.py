"""
Termpose logger.

Messages from the termpose package carry a [termpose] prefix and stay silent
(loguru's `disable("termpose")` in termpose/__init__.py) until a roundtrip
session opens with start_session(). end_session() silences them again.
"""

from pathlib import Path

from loguru import logger

from termpose.utils.logger import setup_logger

CONTEXT_PREFIX = "[termpose]"


def start_session(log_dir: Path, input_file: Path, config) -> Path:
    """
    Open a logging session for validating `input_file`.

    Args:
        log_dir: Directory for the session log and artifacts
        input_file: File being validated, recorded in the header
        config: PrintConfig in use, recorded in the header

    Returns:
        Path to log file
    """
    logger.enable("termpose")
    log_file = setup_logger(
        "termpose",
        log_dir,
        {
            "Input": input_file,
            "Indent": repr(config.indent),
            "Line width": config.line_width,
        },
    )
    _log_info(f"Starting roundtrip validation of {input_file.name}")
    _log_info(f"Log file: {log_file}")
    return log_file


def end_session() -> None:
    logger.disable("termpose")


def _log_info(message: str) -> None:
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    logger.debug(f"{CONTEXT_PREFIX} {message}")


def log_roundtrip_result(name: str, result, elapsed_time: float) -> None:
    """
    Log the outcome of one roundtrip validation.

    Args:
        name: Input file name
        result: RoundtripResult from validate_roundtrip()
        elapsed_time: Seconds spent, setup included
    """
    summary = f"text diffs: {result.text_diffs}, tree stable: {result.tree_stable}"
    if result.error:
        _log_error(f"{name}: roundtrip validation errored out ({elapsed_time:.2f}s)")
        _log_error(f"  Error: {result.error}")
    elif result.success:
        _log_success(f"{name}: roundtrip validation passed ({summary}) ({elapsed_time:.2f}s)")
    else:
        _log_error(f"{name}: roundtrip validation failed ({summary}) ({elapsed_time:.2f}s)")
