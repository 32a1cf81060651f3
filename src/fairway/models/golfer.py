"""Normalized golfer records shared by the feed normalizer and standings engine."""

from __future__ import annotations

from typing import Literal, Optional, Tuple

from pydantic import BaseModel, Field, field_validator
from pydantic.config import ConfigDict


GolferStatus = Literal["active", "cut", "wd"]
Rounds = Tuple[Optional[int], Optional[int], Optional[int], Optional[int]]

EMPTY_ROUNDS: Rounds = (None, None, None, None)
DEFAULT_PAR = 72


def _coerce_rounds(value):
    if value is None:
        return EMPTY_ROUNDS
    value = tuple(value)
    if len(value) != 4:
        raise ValueError(f"rounds must have exactly 4 slots, got {len(value)}")
    return value


class GolferScore(BaseModel):
    """One competitor in one scoreboard snapshot."""

    name: str
    position: str = "—"
    score: int | None = None
    today: int | None = None
    thru: str = "—"
    status: GolferStatus = "active"
    rounds: Rounds = EMPTY_ROUNDS
    par: int = Field(default=DEFAULT_PAR, gt=0)

    model_config = ConfigDict(frozen=True)

    @field_validator("rounds", mode="before")
    @classmethod
    def _four_rounds(cls, value):
        return _coerce_rounds(value)

    @property
    def key(self) -> str:
        """Case-insensitive join key."""

        return self.name.strip().lower()

    @property
    def is_out(self) -> bool:
        return self.status in ("cut", "wd")

    @classmethod
    def placeholder(cls, name: str) -> "GolferScore":
        """Record used for picks that are not on the scoreboard."""

        return cls(name=name)


class GolferStanding(GolferScore):
    """A picked golfer decorated with league scoring adjustments."""

    adj_score: int = 0
    display_rounds: Rounds = EMPTY_ROUNDS

    @field_validator("display_rounds", mode="before")
    @classmethod
    def _four_display_rounds(cls, value):
        return _coerce_rounds(value)
