"""Lightweight REST client for the fairway API."""

from __future__ import annotations

import argparse
import json
import logging
import time

import httpx


logger = logging.getLogger(__name__)


def _show(resp: httpx.Response) -> None:
    if resp.status_code == 404:
        raise SystemExit(f"not found: {resp.request.url}")
    if resp.status_code == 400:
        raise SystemExit(f"rejected: {resp.json().get('detail')}")
    resp.raise_for_status()
    print(json.dumps(resp.json(), indent=2, ensure_ascii=False))


def standings_line(client: httpx.Client) -> str | None:
    """One-line standings summary, or None when the refresh fails."""

    try:
        resp = client.get("/standings")
        resp.raise_for_status()
        payload = resp.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning("Standings refresh failed: %s; retrying next interval", exc)
        return None
    return "  ".join(
        f"{s['rank']}.{s['player']} {s['total_score']:+d} ({payload['money'].get(s['player'], 0):+d})"
        for s in payload["standings"]
    )


def main() -> None:
    parser = argparse.ArgumentParser(description="Interact with the fairway REST API")
    parser.add_argument("base_url", help="Base URL of the API, e.g. http://localhost:8000")
    parser.add_argument("--scores", action="store_true", help="Print the live leaderboard")
    parser.add_argument("--standings", action="store_true", help="Print standings and weekly money")
    parser.add_argument("--draft", action="store_true", help="Print draft order and who is on the clock")
    parser.add_argument("--pick", metavar="GOLFER", help="Draft a golfer for the player on the clock")
    parser.add_argument("--as-player", help="Player making the pick")
    parser.add_argument("--undo", action="store_true", help="Remove the most recent pick")
    parser.add_argument("--finalize", action="store_true", help="Finalize the active tournament")
    parser.add_argument("--history", action="store_true", help="Print finalized results")
    parser.add_argument("--season", action="store_true", help="Print season money")
    parser.add_argument(
        "--watch",
        type=float,
        metavar="SECONDS",
        default=None,
        help="Re-fetch standings every SECONDS until interrupted",
    )
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    with httpx.Client(base_url=args.base_url, timeout=30.0) as client:
        if args.pick or args.undo or args.finalize:
            active = client.get("/tournaments/active")
            active.raise_for_status()
            tournament = active.json()
            if not tournament:
                raise SystemExit("no active tournament")
            tid = tournament["id"]
            if args.pick:
                _show(client.post(f"/tournaments/{tid}/picks", json={"golfer_name": args.pick, "as_player": args.as_player}))
            if args.undo:
                _show(client.delete(f"/tournaments/{tid}/picks/last"))
            if args.finalize:
                _show(client.post(f"/tournaments/{tid}/finalize"))

        if args.scores:
            _show(client.get("/scores"))
        if args.draft:
            _show(client.get("/draft"))
        if args.history:
            _show(client.get("/history"))
        if args.season:
            _show(client.get("/season-money"))
        if args.standings:
            _show(client.get("/standings"))

        if args.watch:
            interval = max(5.0, args.watch)
            try:
                while True:
                    time.sleep(interval)
                    line = standings_line(client)
                    if line is None:
                        continue
                    print(f"[{time.strftime('%H:%M:%S')}] {line}")
            except KeyboardInterrupt:
                return


if __name__ == "__main__":
    main()
