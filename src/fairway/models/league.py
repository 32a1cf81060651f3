"""League-level records: picks, tournaments, standings and persisted results."""

from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from .golfer import GolferStanding, Rounds


class Pick(BaseModel):
    tournament_id: str
    player_name: str
    golfer_name: str = Field(..., min_length=1)
    pick_order: int = Field(..., ge=1)

    model_config = ConfigDict(frozen=True)


class Tournament(BaseModel):
    id: str
    name: str
    course: str = ""
    date: str = ""
    status: Literal["upcoming", "active", "finalized"] = "upcoming"
    draft_order: List[str] = Field(default_factory=list)
    is_major: bool = False

    model_config = ConfigDict(frozen=True)


class PlayerStanding(BaseModel):
    """A league player's position for one snapshot; recomputed every refresh."""

    player: str
    total_score: int
    golfers: List[GolferStanding]
    has_winner: bool
    has_top3: bool
    rank: int = 0

    model_config = ConfigDict(frozen=True)

    @property
    def golfers_cut(self) -> int:
        return sum(1 for golfer in self.golfers if golfer.is_out)


class DraftSlot(BaseModel):
    player: str
    pick: int
    round: int

    model_config = ConfigDict(frozen=True)


class ResultRow(BaseModel):
    tournament_id: str
    player_name: str
    total_score: int
    rank: int
    has_winner: bool
    has_top3: bool
    money_won: int
    golfers_cut: int = 0

    model_config = ConfigDict(frozen=True)


class GolferResultRow(BaseModel):
    tournament_id: str
    player_name: str
    golfer_name: str
    position: str
    score: int | None
    adj_score: int | None
    status: str
    rounds: Rounds

    model_config = ConfigDict(frozen=True)


class SeasonMoney(BaseModel):
    player_name: str
    total: int

    model_config = ConfigDict(frozen=True)
