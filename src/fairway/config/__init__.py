"""Configuration helpers for league rules and runtime settings."""

from .env import configured_league
from .league import LeagueRules, PayoutRules, get_league, iter_leagues

__all__ = [
    "LeagueRules",
    "PayoutRules",
    "configured_league",
    "get_league",
    "iter_leagues",
]
