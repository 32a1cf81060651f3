"""Standings, payouts and draft ordering."""

from .draft import DraftError, available_golfers, current_drafter, snake_draft_order
from .standings import (
    build_golfer_rows,
    build_pick_map,
    build_result_rows,
    compute_money,
    compute_standings,
    format_money,
    to_rel_score,
)

__all__ = [
    "DraftError",
    "available_golfers",
    "build_golfer_rows",
    "build_pick_map",
    "build_result_rows",
    "compute_money",
    "compute_standings",
    "current_drafter",
    "format_money",
    "snake_draft_order",
    "to_rel_score",
]
