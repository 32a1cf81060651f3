"""Command-line interface for live scores, standings and draft order."""

from __future__ import annotations

import argparse
import csv
import json
import logging
from pathlib import Path
from typing import List, Optional

from fairway.config import LeagueRules, configured_league, get_league
from fairway.config_loader import LeagueProfile
from fairway.ingest import fetch_live_scores, normalize_payload
from fairway.models import GolferScore, Pick
from fairway.scoring import (
    build_pick_map,
    compute_money,
    compute_standings,
    format_money,
    snake_draft_order,
    to_rel_score,
)


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Golf pick'em league scoring")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    scores = subparsers.add_parser("scores", help="Print the normalized live leaderboard")
    scores.add_argument("--feed", type=Path, default=None, help="Read a saved scoreboard JSON instead of fetching")
    scores.add_argument("--json", action="store_true", help="Emit JSON instead of a table")

    standings = subparsers.add_parser("standings", help="Compute standings and weekly money from picks")
    standings.add_argument("--picks", type=Path, required=True, help="CSV with player_name,golfer_name columns")
    standings.add_argument("--feed", type=Path, default=None, help="Read a saved scoreboard JSON instead of fetching")
    standings.add_argument("--league", default=None, help="League key (e.g., FAIRWAY, FAIRWAY_CLASSIC)")
    standings.add_argument("--league-file", type=Path, default=None, help="Load a custom league profile JSON")
    standings.add_argument("--save-league", type=Path, default=None, help="Save the resolved league profile JSON")
    standings.add_argument("--output", type=Path, default=None, help="Optional path to write standings JSON")

    draft = subparsers.add_parser("draft", help="Print a snake draft order")
    draft.add_argument("players", nargs="+", help="Players in first-round order")
    draft.add_argument("--picks-per-player", type=int, default=4, help="Rounds in the draft")

    serve = subparsers.add_parser("serve", help="Run the REST API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    return parser.parse_args(argv)


def _resolve_league(args: argparse.Namespace) -> LeagueRules:
    if args.league_file:
        return LeagueProfile.load(args.league_file).to_rules()
    if args.league:
        return get_league(args.league)
    return configured_league()


def _load_scores(feed: Optional[Path]) -> List[GolferScore]:
    if feed is None:
        return fetch_live_scores()
    try:
        payload = json.loads(feed.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise SystemExit(f"Invalid scoreboard JSON in {feed}: {exc}") from exc
    return normalize_payload(payload)


def load_picks_csv(path: Path, *, tournament_id: str = "cli") -> List[Pick]:
    picks: List[Pick] = []
    with path.open(newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        for idx, row in enumerate(reader, start=1):
            player = (row.get("player_name") or "").strip()
            golfer = (row.get("golfer_name") or "").strip()
            if not player or not golfer:
                raise ValueError(f"{path}:{idx + 1}: player_name and golfer_name are required")
            order = (row.get("pick_order") or "").strip()
            picks.append(
                Pick(
                    tournament_id=tournament_id,
                    player_name=player,
                    golfer_name=golfer,
                    pick_order=int(order) if order else idx,
                )
            )
    return sorted(picks, key=lambda pick: pick.pick_order)


def _print_scores(scores: List[GolferScore]) -> None:
    print(f"{'POS':<5} {'GOLFER':<28} {'TOT':>4} {'TODAY':>5} {'THRU':>5}  ROUNDS")
    for golfer in scores:
        rounds = " ".join("-" if value is None else str(value) for value in golfer.rounds)
        print(
            f"{golfer.position:<5} {golfer.name:<28} {to_rel_score(golfer.score):>4} "
            f"{to_rel_score(golfer.today):>5} {golfer.thru:>5}  {rounds}"
        )


def main(argv: Optional[List[str]] = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "scores":
        scores = _load_scores(args.feed)
        if args.json:
            print(json.dumps([golfer.model_dump() for golfer in scores], indent=2, ensure_ascii=False))
        else:
            _print_scores(scores)
        return

    if args.command == "draft":
        if args.picks_per_player < 1:
            raise SystemExit("--picks-per-player must be at least 1")
        for slot in snake_draft_order(args.players, args.picks_per_player):
            print(f"{slot.pick:>3}  R{slot.round + 1}  {slot.player}")
        return

    if args.command == "serve":
        import uvicorn

        from fairway.api import create_app

        uvicorn.run(create_app(), host=args.host, port=args.port)
        return

    league = _resolve_league(args)
    if args.save_league:
        LeagueProfile.from_rules(league).save(args.save_league)
        print(f"Saved league profile to {args.save_league}")
    try:
        picks = load_picks_csv(args.picks)
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc
    scores = _load_scores(args.feed)
    standings = compute_standings(scores, build_pick_map(picks), league=league)
    money = compute_money(standings, league=league)

    for standing in standings:
        golfers = ", ".join(f"{golfer.name} ({to_rel_score(golfer.adj_score)})" for golfer in standing.golfers)
        flags = "".join(flag for flag, on in (("W", standing.has_winner), ("3", standing.has_top3)) if on)
        print(
            f"{standing.rank:>2}. {standing.player:<10} {to_rel_score(standing.total_score):>5} "
            f"{format_money(money[standing.player]):>6} {flags:<2} {golfers}"
        )

    if args.output:
        payload = {
            "standings": [standing.model_dump() for standing in standings],
            "money": money,
        }
        args.output.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        print(f"Wrote standings to {args.output}")


if __name__ == "__main__":
    main()
