"""Rich terminal display for roll results."""
from __future__ import annotations

from rich import box
from rich.console import Console
from rich.markdown import Markdown
from rich.table import Table
from rich.text import Text

from dicey.engine.formatter import Verbosity, format_die, format_result
from dicey.errors import RollError, RollSyntaxError
from dicey.models.result import DieStatus, RollResult

console = Console()

_STATUS_STYLE = {
    DieStatus.KEPT: "bold",
    DieStatus.DROPPED: "dim strike",
    DieStatus.REROLLED: "dim italic strike",
}


def show_config_error(error: Exception) -> None:
    console.print(Text(f"Invalid configuration: {error}", style="bold red"))


class Display:
    def __init__(
        self,
        verbosity: Verbosity = Verbosity.MEDIUM,
        markdown: bool = False,
        show_dice: bool = False,
    ):
        self.console = console
        self.verbosity = verbosity
        self.markdown = markdown
        self.show_dice = show_dice

    def show_result(self, result: RollResult) -> None:
        if self.markdown:
            self.console.print(Markdown(format_result(result, markdown=True, verbosity=self.verbosity)))
        else:
            self.console.print(Text(format_result(result, verbosity=self.verbosity)))
        if self.show_dice and result.dice:
            self.show_dice_table(result)

    def show_dice_table(self, result: RollResult) -> None:
        table = Table(box=box.SIMPLE_HEAVY, border_style="cyan")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Die")
        table.add_column("Roll", justify="right")
        table.add_column("Status")
        table.add_column("Score", justify="right")
        for i, die in enumerate(result.dice, 1):
            style = _STATUS_STYLE[die.status]
            label = "dF" if die.fudge else f"d{die.sides}"
            status = die.status.value + (" (exploded)" if die.exploded else "")
            score = "-" if die.score is None else str(die.score)
            table.add_row(str(i), label, Text(format_die(die), style=style), status, score)
        self.console.print(table)

    def show_error(self, error: RollError, text: str = "") -> None:
        if isinstance(error, RollSyntaxError) and text:
            stripped = text.strip()
            self.console.print(Text(f"  {stripped}", style="dim"))
            self.console.print(Text("  " + " " * error.position + "^", style="bold red"))
        self.console.print(Text(str(error), style="bold red"))

    def show_help(self) -> None:
        table = Table(title="Dice notation", box=box.SIMPLE, show_header=False)
        table.add_column("Syntax", style="cyan bold")
        table.add_column("Meaning")
        table.add_row("2d6+3", "roll two six-sided dice and add 3")
        table.add_row("d%  dF", "percentile die, fudge die")
        table.add_row("4d6kh3  kl  dh  dl", "keep highest 3 / keep lowest / drop highest / drop lowest")
        table.add_row("r  ro", "reroll 1s (or r<3, r=2 ...) repeatedly / once")
        table.add_row("!  !o", "explode on max (or !>=5 ...) repeatedly / once")
        table.add_row("t5  tt10  f1", "count successes >=5, doubles >=10, failures <=1")
        table.add_row("t[2,4,6]", "count dice showing any of the listed faces")
        table.add_row("4d6 r1 kh3", "modifiers may be separated by spaces")
        table.add_row("(1d4+1)*2  7/2", "arithmetic; division truncates")
        table.add_row("3d6 ^ 6  ^+  ^#", "repeat 6 times: separately / summed / sorted")
        table.add_row("$str = 3d6", "bind a variable, use it later as $str")
        table.add_row("1d20+5 : attack", "attach a reason")
        self.console.print(table)
