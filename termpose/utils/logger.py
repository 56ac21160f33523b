"""
Logging session setup.

A session sends every record to `<log_dir>/<name>.log` and INFO and above to
stdout, starting with a provenance header describing the run.
"""

import sys
from pathlib import Path
from typing import Dict

from loguru import logger

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <7} | {message}"
CONSOLE_FORMAT = "{time:HH:mm:ss} | <level>{level: <7}</level> | <level>{message}</level>"


def setup_logger(name: str, log_dir: Path, provenance: Dict[str, object]) -> Path:
    """
    Replace the active loguru sinks with a file + console pair for one session.

    Args:
        name: Log file stem (e.g., "termpose")
        log_dir: Directory for this session, created if missing
        provenance: Fields written in the header after the command line

    Returns:
        Path to log file
    """
    log_dir.mkdir(exist_ok=True, parents=True)
    log_file = log_dir / f"{name}.log"

    logger.remove()
    logger.add(log_file, format=FILE_FORMAT, level="DEBUG")
    logger.add(sys.stdout, format=CONSOLE_FORMAT, level="INFO", colorize=True)

    log_provenance(provenance)
    return log_file


def log_provenance(fields: Dict[str, object]) -> None:
    """Write the session header: command line, working directory, then `fields`."""
    logger.info("=" * 80)
    logger.info(f"Command: {' '.join(sys.argv)}")
    logger.info(f"Working directory: {Path.cwd()}")
    for key, value in fields.items():
        logger.info(f"{key}: {value}")
    logger.info("=" * 80)
