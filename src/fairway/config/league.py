"""League configuration: roster, admins and payout amounts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Mapping, Tuple


@dataclass(frozen=True)
class PayoutRules:
    """Dollar amounts each rule collects from every other player."""

    lowest_strokes: int = 10
    outright_winner: int = 10
    top3: int = 5


@dataclass(frozen=True)
class LeagueRules:
    name: str
    roster: Tuple[str, ...]
    admins: Tuple[str, ...] = ()
    payout: PayoutRules = field(default_factory=PayoutRules)
    picks_per_player: int = 4

    def __post_init__(self) -> None:
        if not self.roster:
            raise ValueError("roster must contain at least one player")
        if len(set(self.roster)) != len(self.roster):
            raise ValueError(f"roster has duplicate players: {self.roster!r}")
        unknown_admins = set(self.admins) - set(self.roster)
        if unknown_admins:
            raise ValueError(f"admins not on roster: {sorted(unknown_admins)}")
        if self.picks_per_player < 1:
            raise ValueError("picks_per_player must be at least 1")

    def is_admin(self, player: str) -> bool:
        return player in self.admins

    def has_player(self, player: str) -> bool:
        return player in self.roster


_LEAGUES: Dict[str, LeagueRules] = {
    "FAIRWAY": LeagueRules(
        name="FAIRWAY",
        roster=("Eric", "Max", "Hayden", "Andrew", "Brennan", "Chase"),
        admins=("Eric", "Chase"),
    ),
    "FAIRWAY_CLASSIC": LeagueRules(
        name="FAIRWAY_CLASSIC",
        roster=("Eric", "Max", "Hayden", "Andrew", "Brennan"),
        admins=("Eric",),
    ),
}

DEFAULT_LEAGUE_KEY = "FAIRWAY"


def iter_leagues() -> Iterable[LeagueRules]:
    """Return an iterator of all configured leagues."""

    return _LEAGUES.values()


def get_league(key: str = DEFAULT_LEAGUE_KEY) -> LeagueRules:
    """Fetch a league by key, raising KeyError if missing."""

    normalized = key.strip().upper()
    if normalized not in _LEAGUES:
        raise KeyError(f"No league configured for key={key!r}")
    return _LEAGUES[normalized]


# Read-only view for callers that only need the rosters.
LEAGUE_ROSTERS: Mapping[str, Tuple[str, ...]] = {
    key: rules.roster for key, rules in _LEAGUES.items()
}
