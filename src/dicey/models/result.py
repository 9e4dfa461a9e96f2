from __future__ import annotations

from enum import Enum
from typing import Annotated, Iterator, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from dicey.models.expression import RepeatMode


class DieStatus(str, Enum):
    KEPT = "kept"
    DROPPED = "dropped"
    REROLLED = "rerolled"


class DieOutcome(BaseModel):
    """One physical die: its face and what the modifiers did to it."""

    model_config = ConfigDict(frozen=True)

    sides: int
    value: int
    status: DieStatus = DieStatus.KEPT
    exploded: bool = False
    fudge: bool = False
    score: Optional[int] = None

    @property
    def kept(self) -> bool:
        return self.status is DieStatus.KEPT


class _RolledBase(BaseModel):
    model_config = ConfigDict(frozen=True)


class RolledLiteral(_RolledBase):
    kind: Literal["literal"] = "literal"
    total: int


class RolledDice(_RolledBase):
    kind: Literal["dice"] = "dice"
    notation: str
    mode: Literal["sum", "count"] = "sum"
    dice: tuple[DieOutcome, ...] = ()
    total: int


class RolledBinary(_RolledBase):
    kind: Literal["binary"] = "binary"
    op: Literal["+", "-", "*", "/"]
    left: RolledNode
    right: RolledNode
    total: int


class RolledVariable(_RolledBase):
    kind: Literal["variable"] = "variable"
    name: str
    inner: RolledNode
    total: Optional[int]


class RolledRepeat(_RolledBase):
    kind: Literal["repeat"] = "repeat"
    mode: RepeatMode
    groups: tuple[RolledNode, ...]
    total: Optional[int] = None


RolledNode = Annotated[
    Union[RolledLiteral, RolledDice, RolledBinary, RolledVariable, RolledRepeat],
    Field(discriminator="kind"),
]

RolledBinary.model_rebuild()
RolledVariable.model_rebuild()
RolledRepeat.model_rebuild()


def iter_dice(node: RolledNode) -> Iterator[DieOutcome]:
    """Yield every die in the tree, left to right."""
    if isinstance(node, RolledDice):
        yield from node.dice
    elif isinstance(node, RolledBinary):
        yield from iter_dice(node.left)
        yield from iter_dice(node.right)
    elif isinstance(node, RolledVariable):
        yield from iter_dice(node.inner)
    elif isinstance(node, RolledRepeat):
        for group in node.groups:
            yield from iter_dice(group)


class RollResult(BaseModel):
    """Outcome of rolling one line of dice notation.

    ``total`` is None only for repeats that keep their groups separate
    (``^`` and ``^#``).
    """

    model_config = ConfigDict(frozen=True)

    notation: str
    total: Optional[int]
    rolled: RolledNode
    reason: Optional[str] = None

    @property
    def dice(self) -> tuple[DieOutcome, ...]:
        return tuple(iter_dice(self.rolled))

    @property
    def kept_dice(self) -> tuple[DieOutcome, ...]:
        return tuple(d for d in self.dice if d.kept)
