"""Typer CLI application."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer

from dicey.config import limits_from_config, load_config
from dicey.engine.formatter import Verbosity
from dicey.engine.random_source import PseudoRandomSource
from dicey.engine.roller import Session, roll as roll_text
from dicey.errors import RollError

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="dicey",
    help="Roll dice from dice notation like 4d6kh3 or 2d20kl1+5.",
    no_args_is_help=True,
)

_EXIT_WORDS = frozenset({"quit", "exit", "q"})


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr"),
) -> None:
    """Dice notation roller."""
    from rich.console import Console
    from rich.logging import RichHandler

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _build_display(config: dict, verbosity: Optional[Verbosity], markdown: bool, show_dice: bool):
    from dicey.cli.display import Display

    display_cfg = config.get("display", {})
    if verbosity is None:
        value = display_cfg.get("verbosity", Verbosity.MEDIUM.value)
        try:
            verbosity = Verbosity(value)
        except ValueError:
            choices = ", ".join(v.value for v in Verbosity)
            raise ValueError(f"display.verbosity must be one of {choices}, got {value!r}") from None
    markdown = markdown or bool(display_cfg.get("markdown", False))
    return Display(verbosity=verbosity, markdown=markdown, show_dice=show_dice)


def _setup(config_path: Optional[Path], verbosity: Optional[Verbosity], markdown: bool, show_dice: bool):
    """Load config and build the display and limits, exiting 1 on a bad config."""
    from dicey.cli.display import show_config_error

    try:
        config = load_config(config_path)
        display = _build_display(config, verbosity, markdown, show_dice)
        limits = limits_from_config(config)
    except ValueError as exc:
        logger.debug("Invalid configuration: %s", exc)
        show_config_error(exc)
        raise typer.Exit(code=1)
    return display, limits


@app.command()
def roll(
    expression: List[str] = typer.Argument(..., help="Dice notation, e.g. 4d6kh3"),
    seed: Optional[int] = typer.Option(None, "--seed", "-s", help="Seed for reproducible rolls"),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON"),
    markdown: bool = typer.Option(False, "--markdown", "-m", help="Render with markdown"),
    verbosity: Optional[Verbosity] = typer.Option(None, "--verbosity", case_sensitive=False),
    dice: bool = typer.Option(False, "--dice", "-d", help="Show a table of every die"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to a dicey.toml"),
) -> None:
    """Roll one line of dice notation."""
    display, limits = _setup(config_path, verbosity, markdown, dice)
    text = " ".join(expression)
    try:
        result = roll_text(text, PseudoRandomSource(seed), limits=limits)
    except RollError as exc:
        logger.debug("Roll of %r failed: %s", text, exc)
        display.show_error(exc, text)
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(result.model_dump_json(indent=2))
    else:
        display.show_result(result)


@app.command()
def repl(
    seed: Optional[int] = typer.Option(None, "--seed", "-s", help="Seed for reproducible rolls"),
    markdown: bool = typer.Option(False, "--markdown", "-m", help="Render with markdown"),
    verbosity: Optional[Verbosity] = typer.Option(None, "--verbosity", case_sensitive=False),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to a dicey.toml"),
) -> None:
    """Roll lines interactively. ``$name = ...`` defines variables; ``help`` lists the syntax."""
    display, limits = _setup(config_path, verbosity, markdown, show_dice=False)
    session = Session(PseudoRandomSource(seed), limits)

    while True:
        try:
            line = display.console.input("[bold cyan]> [/bold cyan]").strip()
        except (EOFError, KeyboardInterrupt):
            break
        if not line:
            continue
        if line.lower() in _EXIT_WORDS:
            break
        if line.lower() in ("help", "?"):
            display.show_help()
            continue
        try:
            display.show_result(session.execute(line))
        except RollError as exc:
            logger.debug("Roll of %r failed: %s", line, exc)
            display.show_error(exc, line)


if __name__ == "__main__":
    app()
