"""Canonical league models."""

from .golfer import DEFAULT_PAR, EMPTY_ROUNDS, GolferScore, GolferStanding, GolferStatus, Rounds
from .league import (
    DraftSlot,
    GolferResultRow,
    Pick,
    PlayerStanding,
    ResultRow,
    SeasonMoney,
    Tournament,
)

__all__ = [
    "DEFAULT_PAR",
    "EMPTY_ROUNDS",
    "DraftSlot",
    "GolferResultRow",
    "GolferScore",
    "GolferStanding",
    "GolferStatus",
    "Pick",
    "PlayerStanding",
    "ResultRow",
    "Rounds",
    "SeasonMoney",
    "Tournament",
]
