"""Pydantic models for API I/O."""

from .league import (
    DraftResponse,
    PickRequest,
    ResultEditRequest,
    StandingsResponse,
    TournamentRequest,
)

__all__ = [
    "DraftResponse",
    "PickRequest",
    "ResultEditRequest",
    "StandingsResponse",
    "TournamentRequest",
]
