"""
Printer Configuration

Resolves PrintConfig from three layers, later ones overriding earlier ones:
defaults (defaults.py), environment variables, and an optional YAML file.

Examples:
    # Defaults plus whatever TERMPOSE_INDENT / TERMPOSE_LINE_WIDTH say
    >>> config = load_print_config()

    # YAML file on top (keys: indent, line_width)
    >>> config = load_print_config(Path("termpose.yaml"))
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from omegaconf import OmegaConf

from termpose.defaults import DEFAULT_INDENT, DEFAULT_LINE_WIDTH, get_default_print_config

load_dotenv()

ENV_INDENT = "TERMPOSE_INDENT"
ENV_LINE_WIDTH = "TERMPOSE_LINE_WIDTH"


@dataclass(frozen=True)
class PrintConfig:
    """
    Settings for the canonical printer.

    Attributes:
        indent: Whitespace written once per nesting level (spaces or tabs only)
        line_width: Maximum width of a single-line form, indentation excluded
    """

    indent: str = DEFAULT_INDENT
    line_width: int = DEFAULT_LINE_WIDTH

    def __post_init__(self):
        if not self.indent or self.indent.strip(" \t"):
            raise ValueError(f"indent must be a non-empty run of spaces or tabs, got {self.indent!r}")
        if self.line_width < 1:
            raise ValueError(f"line_width must be positive, got {self.line_width}")


def _unescape_indent(value: str) -> str:
    # .env files cannot hold a literal tab comfortably
    return value.replace("\\t", "\t")


def _environment_overrides() -> Dict[str, Any]:
    overrides = {}
    if os.getenv(ENV_INDENT):
        overrides["indent"] = _unescape_indent(os.getenv(ENV_INDENT))
    if os.getenv(ENV_LINE_WIDTH):
        overrides["line_width"] = int(os.getenv(ENV_LINE_WIDTH))
    return overrides


def load_print_config(config_path: Optional[Path] = None) -> PrintConfig:
    """
    Load printer settings from defaults, environment and an optional YAML file.

    Args:
        config_path: Optional YAML file with `indent` and/or `line_width` keys

    Returns:
        Resolved PrintConfig

    Raises:
        ValueError: If the YAML file has unknown keys or the values are invalid
    """
    settings = get_default_print_config()
    settings.update(_environment_overrides())

    if config_path is not None:
        file_settings = OmegaConf.to_container(OmegaConf.load(config_path), resolve=True) or {}
        unknown = set(file_settings) - set(settings)
        if unknown:
            raise ValueError(
                f"Unknown printer settings in {config_path}: {sorted(unknown)}. "
                f"Available settings: {sorted(settings)}"
            )
        if "indent" in file_settings:
            file_settings["indent"] = _unescape_indent(str(file_settings["indent"]))
        settings.update(file_settings)

    return PrintConfig(indent=settings["indent"], line_width=int(settings["line_width"]))
