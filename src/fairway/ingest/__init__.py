"""Input adapters that normalize raw scoreboard and odds feeds."""

from .feed import (
    FALLBACK_SCORES,
    RawCompetitor,
    RawScoreboard,
    fetch_live_scores,
    fetch_scoreboard,
    normalize,
    normalize_payload,
)
from .odds import OddsBoard, OddsEntry, fetch_outright_odds

__all__ = [
    "FALLBACK_SCORES",
    "OddsBoard",
    "OddsEntry",
    "RawCompetitor",
    "RawScoreboard",
    "fetch_live_scores",
    "fetch_outright_odds",
    "fetch_scoreboard",
    "normalize",
    "normalize_payload",
]
