"""Standings and weekly payouts from picks plus normalized scores."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from fairway.config import LeagueRules, configured_league
from fairway.models import (
    GolferResultRow,
    GolferScore,
    GolferStanding,
    Pick,
    PlayerStanding,
    ResultRow,
    Rounds,
)


logger = logging.getLogger(__name__)

PickMap = Mapping[str, Sequence[str]]


def build_pick_map(picks: Iterable[Pick]) -> Dict[str, List[str]]:
    """Group golfer names under their player, keeping draft order."""

    pick_map: Dict[str, List[str]] = {}
    for pick in picks:
        pick_map.setdefault(pick.player_name, []).append(pick.golfer_name)
    return pick_map


def position_number(position: str | None) -> Optional[int]:
    """Numeric finishing position, ignoring a leading tie marker."""

    if not position:
        return None
    text = position.strip()
    if text[:1].upper() == "T":
        text = text[1:]
    try:
        return int(text)
    except ValueError:
        return None


def adjusted_score(golfer: GolferScore) -> int:
    """A cut or withdrawn golfer's known score counts double."""

    if golfer.score is None:
        return 0
    if golfer.is_out:
        return golfer.score * 2
    return golfer.score


def display_rounds(golfer: GolferScore) -> Rounds:
    rounds = golfer.rounds
    if golfer.is_out:
        return (rounds[0], rounds[1], rounds[0], rounds[1])
    return rounds


def _score_lookup(scores: Iterable[GolferScore]) -> Dict[str, GolferScore]:
    lookup: Dict[str, GolferScore] = {}
    for golfer in scores:
        lookup.setdefault(golfer.key, golfer)
    return lookup


def _decorate(golfer: GolferScore) -> GolferStanding:
    return GolferStanding(
        **golfer.model_dump(),
        adj_score=adjusted_score(golfer),
        display_rounds=display_rounds(golfer),
    )


def compute_standings(
    scores: Sequence[GolferScore],
    pick_map: PickMap,
    *,
    league: LeagueRules | None = None,
) -> List[PlayerStanding]:
    """Rank every roster player by the sum of their golfers' adjusted scores.

    Lower is better. Ties keep roster order and still get distinct ranks.
    Picks missing from the scoreboard become placeholder records worth 0.
    """

    league = league or configured_league()
    lookup = _score_lookup(scores)

    strays = sorted(set(pick_map) - set(league.roster))
    if strays:
        logger.warning("Ignoring picks for players not on the %s roster: %s", league.name, ", ".join(strays))

    unranked: List[dict] = []
    for player in league.roster:
        golfers: List[GolferStanding] = []
        for golfer_name in pick_map.get(player, ()):
            record = lookup.get(golfer_name.strip().lower())
            if record is None:
                logger.debug("Pick %s for %s not on the scoreboard", golfer_name, player)
                record = GolferScore.placeholder(golfer_name)
            golfers.append(_decorate(record))

        positions = [position_number(golfer.position) for golfer in golfers]
        unranked.append(
            {
                "player": player,
                "total_score": sum(golfer.adj_score for golfer in golfers),
                "golfers": golfers,
                "has_winner": any(pos == 1 for pos in positions),
                "has_top3": any(pos is not None and 1 <= pos <= 3 for pos in positions),
            }
        )

    ordered = sorted(unranked, key=lambda item: item["total_score"])
    return [PlayerStanding(**item, rank=index + 1) for index, item in enumerate(ordered)]


def _collect(money: Dict[str, int], winner: str, amount: int, roster: Sequence[str]) -> None:
    for player in roster:
        if player == winner:
            continue
        money[player] -= amount
        money[winner] += amount


def compute_money(
    standings: Sequence[PlayerStanding],
    *,
    league: LeagueRules | None = None,
) -> Dict[str, int]:
    """Zero-sum weekly money over the full roster.

    Three independent rules, added together: the lowest total collects
    ``lowest_strokes`` from everyone else, and every player holding the
    tournament winner or a top-3 finisher collects that rule's amount from
    everyone else.
    """

    league = league or configured_league()
    roster = league.roster
    payout = league.payout
    money: Dict[str, int] = {player: 0 for player in roster}

    ranked = [standing for standing in standings if standing.player in money]
    if len(ranked) != len(standings):
        logger.warning("Skipping standings for players not on the %s roster", league.name)
    if not ranked:
        return money

    _collect(money, ranked[0].player, payout.lowest_strokes, roster)
    for standing in ranked:
        if standing.has_winner:
            _collect(money, standing.player, payout.outright_winner, roster)
    for standing in ranked:
        if standing.has_top3:
            _collect(money, standing.player, payout.top3, roster)
    return money


def build_result_rows(
    tournament_id: str,
    standings: Sequence[PlayerStanding],
    money: Mapping[str, int],
) -> List[ResultRow]:
    return [
        ResultRow(
            tournament_id=tournament_id,
            player_name=standing.player,
            total_score=standing.total_score,
            rank=standing.rank,
            has_winner=standing.has_winner,
            has_top3=standing.has_top3,
            money_won=money.get(standing.player, 0),
            golfers_cut=standing.golfers_cut,
        )
        for standing in standings
    ]


def build_golfer_rows(tournament_id: str, standings: Sequence[PlayerStanding]) -> List[GolferResultRow]:
    rows: List[GolferResultRow] = []
    for standing in standings:
        for golfer in standing.golfers:
            rows.append(
                GolferResultRow(
                    tournament_id=tournament_id,
                    player_name=standing.player,
                    golfer_name=golfer.name,
                    position=golfer.position or "—",
                    score=golfer.score,
                    adj_score=golfer.adj_score,
                    status=golfer.status,
                    rounds=golfer.rounds,
                )
            )
    return rows


def to_rel_score(score: float | None) -> str:
    if score is None or score != score:
        return "—"
    if score == 0:
        return "E"
    return f"+{score}" if score > 0 else f"{score}"


def format_money(value: int) -> str:
    if value == 0:
        return "$0"
    return f"+${value}" if value > 0 else f"-${abs(value)}"
