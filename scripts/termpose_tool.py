#!/usr/bin/env python3
"""
Command-line interface for termpose files.

Subcommands:
- format: Rewrite a termpose file in canonical form
- validate: Parse a termpose file and report the first error with its location
- roundtrip: Check that a file survives parse → print → parse unchanged
"""

from pathlib import Path

import typer

from termpose import ParseError, format_text, load_print_config, parse_items
from termpose.converter import run_roundtrip
from termpose.utils.timestamp import format_elapsed

app = typer.Typer(
    add_completion=False,
    help="Format and validate termpose files",
    invoke_without_command=True,
)


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


@app.command("format")
def format_command(
    term_file: Path = typer.Argument(
        ...,
        help="Path to the termpose file",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    output: Path = typer.Option(
        None,
        "--output",
        "-o",
        help="Output path (if not specified, prints to stdout)",
    ),
    in_place: bool = typer.Option(
        False,
        "--in-place",
        "-i",
        help="Rewrite the input file",
    ),
    config_file: Path = typer.Option(
        None,
        "--config",
        "-c",
        help="YAML file with printer settings (indent, line_width)",
        exists=True,
        dir_okay=False,
    ),
):
    """
    Rewrite a termpose file in canonical form.

    Examples:\n

        $ termpose_tool.py format catalog.term                  # Print to stdout

        $ termpose_tool.py format catalog.term -i               # Rewrite in place

        $ termpose_tool.py format catalog.term -o out.term -c printer.yaml
    """
    if output and in_place:
        typer.secho("Error: --output and --in-place are mutually exclusive", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    try:
        config = load_print_config(config_file)
        canonical = format_text(term_file.read_text(encoding="utf-8"), config)
    except (ParseError, ValueError) as e:
        typer.secho(f"✗ {term_file.name}: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    destination = term_file if in_place else output
    if destination:
        destination.write_text(canonical, encoding="utf-8")
        typer.secho(f"✓ Canonical text saved to: {destination}", fg=typer.colors.GREEN)
    else:
        typer.echo(canonical, nl=False)


@app.command("validate")
def validate_command(
    term_files: list[Path] = typer.Argument(
        ...,
        help="Termpose files to parse",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
):
    """
    Parse termpose files and report the first error in each.

    Example:\n

        $ termpose_tool.py validate data/*.term
    """
    failed = 0
    for term_file in term_files:
        try:
            items = parse_items(term_file.read_text(encoding="utf-8"))
        except ParseError as e:
            failed += 1
            typer.secho(f"  ✗ {term_file.name}: {e}", fg=typer.colors.RED, err=True)
            continue
        typer.secho(f"  ✓ {term_file.name} ({len(items)} top-level term(s))", fg=typer.colors.GREEN)

    typer.echo(f"\nValid: {len(term_files) - failed}/{len(term_files)}")
    raise typer.Exit(code=1 if failed else 0)


@app.command("roundtrip")
def roundtrip_command(
    term_file: Path = typer.Argument(
        ...,
        help="Path to the termpose file",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    log_dir: Path = typer.Option(
        None,
        "--log-dir",
        help="Directory for the log and artifacts (default: LOGS_PATH/roundtrip_TIMESTAMP)",
    ),
):
    """
    Validate that a file survives parse → print → parse unchanged.

    Logs and the canonical text are saved to outs/logs/roundtrip_TIMESTAMP/.

    Example:\n

        $ termpose_tool.py roundtrip catalog.term
    """
    typer.secho(f"\nRoundtrip: {term_file.name}\n", fg=typer.colors.BLUE, bold=True)

    result = run_roundtrip(term_file, config=load_print_config(), log_dir=log_dir)

    if result.success:
        typer.secho("\n✓ Roundtrip succeeded", fg=typer.colors.GREEN)
    else:
        typer.secho("\n✗ Roundtrip failed", fg=typer.colors.RED, err=True)
        if result.error:
            typer.secho(f"  Error: {result.error}", err=True)

    tree_status = "?" if result.tree_stable is None else "✓" if result.tree_stable else "✗"
    typer.echo(f"  Tree stable: {tree_status}")
    if result.format_diffs is not None:
        typer.echo(f"  Lines changed by formatting: {result.format_diffs}")
    typer.echo(f"  Time: {format_elapsed(result.time_ms / 1000)}")

    raise typer.Exit(code=0 if result.success else 1)


if __name__ == "__main__":
    app()
