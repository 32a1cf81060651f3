"""Persist and load custom league profiles."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Dict, List

from fairway.config import LeagueRules, PayoutRules


@dataclass
class LeagueProfile:
    roster: List[str]
    admins: List[str] = field(default_factory=list)
    payout: Dict[str, int] = field(default_factory=dict)
    picks_per_player: int = 4
    name: str = "CUSTOM"

    @classmethod
    def load(cls, path: Path) -> "LeagueProfile":
        data = json.loads(path.read_text(encoding="utf-8"))
        return cls(
            roster=list(data.get("roster", [])),
            admins=list(data.get("admins", [])),
            payout=dict(data.get("payout", {})),
            picks_per_player=int(data.get("picks_per_player", 4)),
            name=data.get("name", "CUSTOM"),
        )

    @classmethod
    def from_rules(cls, rules: LeagueRules) -> "LeagueProfile":
        return cls(
            roster=list(rules.roster),
            admins=list(rules.admins),
            payout=asdict(rules.payout),
            picks_per_player=rules.picks_per_player,
            name=rules.name,
        )

    def to_rules(self) -> LeagueRules:
        return LeagueRules(
            name=self.name,
            roster=tuple(self.roster),
            admins=tuple(self.admins),
            payout=PayoutRules(**self.payout),
            picks_per_player=self.picks_per_player,
        )

    def save(self, path: Path) -> None:
        payload = {
            "name": self.name,
            "roster": self.roster,
            "admins": self.admins,
            "payout": self.payout,
            "picks_per_player": self.picks_per_player,
        }
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
