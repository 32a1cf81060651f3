from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, Field

from fairway.models import DraftSlot, Pick, PlayerStanding, Tournament


class TournamentRequest(BaseModel):
    name: str = Field(..., min_length=1)
    course: str = ""
    date: str = ""
    draft_order: List[str] | None = None
    is_major: bool = False


class PickRequest(BaseModel):
    golfer_name: str = Field(..., min_length=1)
    as_player: str | None = None


class ResultEditRequest(BaseModel):
    total_score: int | None = None
    money_won: int | None = None


class StandingsResponse(BaseModel):
    tournament: Tournament | None
    standings: List[PlayerStanding]
    money: Dict[str, int]


class DraftResponse(BaseModel):
    tournament: Tournament | None
    order: List[DraftSlot]
    picks: List[Pick]
    on_the_clock: str | None
    complete: bool
