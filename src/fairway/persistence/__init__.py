"""Persistence layer for tournaments, picks, finalized results and season money."""

from __future__ import annotations

import json
import logging
import sqlite3
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence
from uuid import uuid4

from fairway.config import LeagueRules, configured_league, env
from fairway.models import GolferResultRow, Pick, PlayerStanding, ResultRow, SeasonMoney, Tournament
from fairway.scoring import (
    DraftError,
    build_golfer_rows,
    build_result_rows,
    current_drafter,
    snake_draft_order,
)


logger = logging.getLogger(__name__)


class LeagueStore:
    """SQLite-backed store for one league's tournaments and money."""

    def __init__(self, db_path: Path | str, *, league: LeagueRules | None = None):
        self.league = league or configured_league()
        self._use_uri = False
        env_db = env.db_path()
        if env_db:
            if env_db.startswith("file:"):
                self.db_path: Path | str = env_db
                self._use_uri = True
            else:
                self.db_path = Path(env_db)
        elif isinstance(db_path, str) and db_path.startswith("file:"):
            self.db_path = db_path
            self._use_uri = True
        else:
            self.db_path = Path(db_path)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            conn = sqlite3.connect(self.db_path, uri=self._use_uri)
        except sqlite3.OperationalError:
            fallback_dir = Path(tempfile.gettempdir()) / "fairway-runtime"
            fallback_dir.mkdir(parents=True, exist_ok=True)
            fallback = fallback_dir / "fairway.sqlite"
            logger.warning("Cannot open %s; using %s", self.db_path, fallback)
            conn = sqlite3.connect(fallback)
            self.db_path = fallback
            self._use_uri = False
            self._create_schema(conn)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            self._create_schema(conn)

    def _create_schema(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS tournaments (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                course TEXT NOT NULL DEFAULT '',
                date TEXT NOT NULL DEFAULT '',
                status TEXT NOT NULL,
                draft_order_json TEXT NOT NULL,
                is_major INTEGER NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS picks (
                tournament_id TEXT NOT NULL REFERENCES tournaments(id) ON DELETE CASCADE,
                player_name TEXT NOT NULL,
                golfer_name TEXT NOT NULL,
                pick_order INTEGER NOT NULL,
                created_at TEXT NOT NULL,
                PRIMARY KEY (tournament_id, pick_order)
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS results (
                tournament_id TEXT NOT NULL,
                player_name TEXT NOT NULL,
                total_score INTEGER NOT NULL,
                rank INTEGER NOT NULL,
                has_winner INTEGER NOT NULL,
                has_top3 INTEGER NOT NULL,
                money_won INTEGER NOT NULL,
                golfers_cut INTEGER NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL,
                PRIMARY KEY (tournament_id, player_name)
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS golfer_results (
                tournament_id TEXT NOT NULL,
                player_name TEXT NOT NULL,
                golfer_name TEXT NOT NULL,
                position TEXT NOT NULL,
                score INTEGER,
                adj_score INTEGER,
                status TEXT NOT NULL,
                rounds_json TEXT NOT NULL,
                created_at TEXT NOT NULL,
                PRIMARY KEY (tournament_id, player_name, golfer_name)
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS season_money (
                player_name TEXT PRIMARY KEY,
                total INTEGER NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
        conn.commit()

    # Tournaments

    def create_tournament(
        self,
        *,
        name: str,
        course: str = "",
        date: str = "",
        draft_order: Sequence[str] | None = None,
        is_major: bool = False,
        tournament_id: Optional[str] = None,
    ) -> Tournament:
        """Start a new active tournament, retiring any current one and its picks."""

        order = list(draft_order or self.league.roster)
        unknown = [player for player in order if not self.league.has_player(player)]
        if unknown:
            raise ValueError(f"draft order has players not on the roster: {', '.join(unknown)}")
        if len(set(order)) != len(order):
            raise ValueError("draft order lists a player more than once")

        tournament_id = tournament_id or uuid4().hex
        now = datetime.now(timezone.utc).isoformat()
        with self._connect() as conn:
            for row in conn.execute("SELECT id FROM tournaments WHERE status = 'active'").fetchall():
                logger.info("Retiring active tournament %s", row["id"])
                conn.execute("DELETE FROM picks WHERE tournament_id = ?", (row["id"],))
                conn.execute("UPDATE tournaments SET status = 'finalized' WHERE id = ?", (row["id"],))
            conn.execute(
                """
                INSERT INTO tournaments (id, name, course, date, status, draft_order_json, is_major, created_at)
                VALUES (?, ?, ?, ?, 'active', ?, ?, ?)
                """,
                (tournament_id, name, course, date, json.dumps(order), int(is_major), now),
            )
            conn.commit()
        tournament = self.get_tournament(tournament_id)
        if tournament is None:  # pragma: no cover
            raise KeyError(f"Tournament {tournament_id} not found after insert")
        return tournament

    def get_tournament(self, tournament_id: str) -> Optional[Tournament]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM tournaments WHERE id = ?", (tournament_id,)).fetchone()
        return self._row_to_tournament(row) if row is not None else None

    def active_tournament(self) -> Optional[Tournament]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM tournaments WHERE status = 'active' ORDER BY created_at DESC LIMIT 1"
            ).fetchone()
        return self._row_to_tournament(row) if row is not None else None

    def _require_tournament(self, tournament_id: str) -> Tournament:
        tournament = self.get_tournament(tournament_id)
        if tournament is None:
            raise KeyError(f"Tournament {tournament_id} not found")
        return tournament

    def delete_tournament(self, tournament_id: str) -> None:
        """Remove a tournament, its picks and results, reversing its money."""

        self._require_tournament(tournament_id)
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT player_name, money_won FROM results WHERE tournament_id = ?",
                (tournament_id,),
            ).fetchall()
            now = datetime.now(timezone.utc).isoformat()
            for row in rows:
                if row["money_won"]:
                    self._add_season_money(conn, row["player_name"], -row["money_won"], now)
            conn.execute("DELETE FROM golfer_results WHERE tournament_id = ?", (tournament_id,))
            conn.execute("DELETE FROM results WHERE tournament_id = ?", (tournament_id,))
            conn.execute("DELETE FROM picks WHERE tournament_id = ?", (tournament_id,))
            conn.execute("DELETE FROM tournaments WHERE id = ?", (tournament_id,))
            conn.commit()

    # Picks

    def list_picks(self, tournament_id: str) -> List[Pick]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM picks WHERE tournament_id = ? ORDER BY pick_order",
                (tournament_id,),
            ).fetchall()
        return [self._row_to_pick(row) for row in rows]

    def add_pick(self, tournament_id: str, golfer_name: str, *, as_player: Optional[str] = None) -> Pick:
        """Record the next pick for whoever is on the clock.

        ``as_player`` is the user making the request; non-admins may only pick
        on their own turn.
        """

        tournament = self._require_tournament(tournament_id)
        if tournament.status != "active":
            raise ValueError(f"Tournament {tournament_id} is not active")
        golfer_name = golfer_name.strip()
        if not golfer_name:
            raise ValueError("golfer name is required")

        picks = self.list_picks(tournament_id)
        order = snake_draft_order(tournament.draft_order, self.league.picks_per_player)
        drafter = current_drafter(order, len(picks))
        if drafter is None:
            raise DraftError("Draft is complete")
        if as_player is not None and as_player != drafter and not self.league.is_admin(as_player):
            raise DraftError(f"It is {drafter}'s turn, not {as_player}'s")
        if any(pick.golfer_name.lower() == golfer_name.lower() for pick in picks):
            raise DraftError(f"{golfer_name} has already been drafted")

        pick = Pick(
            tournament_id=tournament_id,
            player_name=drafter,
            golfer_name=golfer_name,
            pick_order=len(picks) + 1,
        )
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO picks (tournament_id, player_name, golfer_name, pick_order, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    pick.tournament_id,
                    pick.player_name,
                    pick.golfer_name,
                    pick.pick_order,
                    datetime.now(timezone.utc).isoformat(),
                ),
            )
            conn.commit()
        return pick

    def undo_last_pick(self, tournament_id: str) -> Optional[Pick]:
        picks = self.list_picks(tournament_id)
        if not picks:
            return None
        last = picks[-1]
        with self._connect() as conn:
            conn.execute(
                "DELETE FROM picks WHERE tournament_id = ? AND pick_order = ?",
                (tournament_id, last.pick_order),
            )
            conn.commit()
        return last

    def clear_picks(self, tournament_id: str) -> int:
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM picks WHERE tournament_id = ?", (tournament_id,))
            conn.commit()
            return cursor.rowcount

    # Results

    def finalize_tournament(
        self,
        tournament_id: str,
        standings: Sequence[PlayerStanding],
        money: Mapping[str, int],
    ) -> List[ResultRow]:
        """Snapshot standings and money, credit season totals, close the tournament."""

        tournament = self._require_tournament(tournament_id)
        if tournament.status == "finalized":
            raise ValueError(f"Tournament {tournament_id} is already finalized")
        if not standings:
            raise ValueError("Cannot finalize without standings")

        results = build_result_rows(tournament_id, standings, money)
        golfer_rows = build_golfer_rows(tournament_id, standings)
        now = datetime.now(timezone.utc).isoformat()
        with self._connect() as conn:
            for result in results:
                conn.execute(
                    """
                    INSERT OR REPLACE INTO results (
                        tournament_id, player_name, total_score, rank, has_winner,
                        has_top3, money_won, golfers_cut, created_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        result.tournament_id,
                        result.player_name,
                        result.total_score,
                        result.rank,
                        int(result.has_winner),
                        int(result.has_top3),
                        result.money_won,
                        result.golfers_cut,
                        now,
                    ),
                )
            for golfer in golfer_rows:
                conn.execute(
                    """
                    INSERT OR REPLACE INTO golfer_results (
                        tournament_id, player_name, golfer_name, position, score,
                        adj_score, status, rounds_json, created_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        golfer.tournament_id,
                        golfer.player_name,
                        golfer.golfer_name,
                        golfer.position,
                        golfer.score,
                        golfer.adj_score,
                        golfer.status,
                        json.dumps(list(golfer.rounds)),
                        now,
                    ),
                )
            for player in self.league.roster:
                self._add_season_money(conn, player, money.get(player, 0), now)
            conn.execute("UPDATE tournaments SET status = 'finalized' WHERE id = ?", (tournament_id,))
            conn.commit()
        logger.info("Finalized tournament %s (%s) with %s results", tournament.name, tournament_id, len(results))
        return results

    def list_results(self, tournament_id: Optional[str] = None) -> List[ResultRow]:
        query = "SELECT * FROM results"
        params: tuple = ()
        if tournament_id:
            query += " WHERE tournament_id = ?"
            params = (tournament_id,)
        query += " ORDER BY created_at DESC, rank"
        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_result(row) for row in rows]

    def list_golfer_results(self, tournament_id: Optional[str] = None) -> List[GolferResultRow]:
        query = "SELECT * FROM golfer_results"
        params: tuple = ()
        if tournament_id:
            query += " WHERE tournament_id = ?"
            params = (tournament_id,)
        query += " ORDER BY created_at DESC, player_name"
        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_golfer_result(row) for row in rows]

    def delete_result(self, tournament_id: str, player_name: str) -> None:
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM results WHERE tournament_id = ? AND player_name = ?",
                (tournament_id, player_name),
            )
            if cursor.rowcount == 0:
                raise KeyError(f"No result for {player_name} in tournament {tournament_id}")
            conn.execute(
                "DELETE FROM golfer_results WHERE tournament_id = ? AND player_name = ?",
                (tournament_id, player_name),
            )
            self._recompute_season_money(conn)
            conn.commit()

    def edit_result(
        self,
        tournament_id: str,
        player_name: str,
        *,
        total_score: Optional[int] = None,
        money_won: Optional[int] = None,
    ) -> ResultRow:
        updates: Dict[str, int] = {}
        if total_score is not None:
            updates["total_score"] = total_score
        if money_won is not None:
            updates["money_won"] = money_won
        if not updates:
            raise ValueError("Nothing to update")
        assignments = ", ".join(f"{column} = ?" for column in updates)
        with self._connect() as conn:
            cursor = conn.execute(
                f"UPDATE results SET {assignments} WHERE tournament_id = ? AND player_name = ?",
                (*updates.values(), tournament_id, player_name),
            )
            if cursor.rowcount == 0:
                raise KeyError(f"No result for {player_name} in tournament {tournament_id}")
            if money_won is not None:
                self._recompute_season_money(conn)
            conn.commit()
            row = conn.execute(
                "SELECT * FROM results WHERE tournament_id = ? AND player_name = ?",
                (tournament_id, player_name),
            ).fetchone()
        return self._row_to_result(row)

    def season_money(self) -> List[SeasonMoney]:
        with self._connect() as conn:
            rows = conn.execute("SELECT player_name, total FROM season_money").fetchall()
        totals = {row["player_name"]: row["total"] for row in rows}
        return [SeasonMoney(player_name=player, total=totals.get(player, 0)) for player in self.league.roster]

    def history(self) -> List[Dict[str, Any]]:
        """Finalized results grouped per tournament, newest first."""

        grouped: Dict[str, Dict[str, Any]] = {}
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT r.*, t.name AS tournament_name, t.date AS tournament_date, t.is_major AS is_major
                FROM results r LEFT JOIN tournaments t ON t.id = r.tournament_id
                ORDER BY r.created_at DESC, r.rank
                """
            ).fetchall()
        for row in rows:
            entry = grouped.setdefault(
                row["tournament_id"],
                {
                    "tournament_id": row["tournament_id"],
                    "tournament_name": row["tournament_name"],
                    "date": row["tournament_date"],
                    "is_major": bool(row["is_major"]),
                    "standings": [],
                    "money": {},
                    "winner_player": None,
                },
            )
            entry["standings"].append(
                {
                    "player": row["player_name"],
                    "score": row["total_score"],
                    "rank": row["rank"],
                    "has_winner": bool(row["has_winner"]),
                    "has_top3": bool(row["has_top3"]),
                    "golfers_cut": row["golfers_cut"],
                }
            )
            entry["money"][row["player_name"]] = row["money_won"]
            if row["has_winner"]:
                entry["winner_player"] = row["player_name"]
        return list(grouped.values())

    def _add_season_money(self, conn: sqlite3.Connection, player: str, delta: int, now: str) -> None:
        conn.execute(
            """
            INSERT INTO season_money (player_name, total, updated_at) VALUES (?, ?, ?)
            ON CONFLICT(player_name) DO UPDATE SET total = total + excluded.total, updated_at = excluded.updated_at
            """,
            (player, delta, now),
        )

    def _recompute_season_money(self, conn: sqlite3.Connection) -> None:
        rows = conn.execute("SELECT player_name, money_won FROM results").fetchall()
        totals: Dict[str, int] = {player: 0 for player in self.league.roster}
        for row in rows:
            totals[row["player_name"]] = totals.get(row["player_name"], 0) + (row["money_won"] or 0)
        now = datetime.now(timezone.utc).isoformat()
        conn.execute("DELETE FROM season_money")
        conn.executemany(
            "INSERT INTO season_money (player_name, total, updated_at) VALUES (?, ?, ?)",
            [(player, total, now) for player, total in totals.items()],
        )

    def _row_to_tournament(self, row: sqlite3.Row) -> Tournament:
        return Tournament(
            id=row["id"],
            name=row["name"],
            course=row["course"],
            date=row["date"],
            status=row["status"],
            draft_order=json.loads(row["draft_order_json"]),
            is_major=bool(row["is_major"]),
        )

    def _row_to_pick(self, row: sqlite3.Row) -> Pick:
        return Pick(
            tournament_id=row["tournament_id"],
            player_name=row["player_name"],
            golfer_name=row["golfer_name"],
            pick_order=row["pick_order"],
        )

    def _row_to_result(self, row: sqlite3.Row) -> ResultRow:
        return ResultRow(
            tournament_id=row["tournament_id"],
            player_name=row["player_name"],
            total_score=row["total_score"],
            rank=row["rank"],
            has_winner=bool(row["has_winner"]),
            has_top3=bool(row["has_top3"]),
            money_won=row["money_won"],
            golfers_cut=row["golfers_cut"],
        )

    def _row_to_golfer_result(self, row: sqlite3.Row) -> GolferResultRow:
        return GolferResultRow(
            tournament_id=row["tournament_id"],
            player_name=row["player_name"],
            golfer_name=row["golfer_name"],
            position=row["position"],
            score=row["score"],
            adj_score=row["adj_score"],
            status=row["status"],
            rounds=tuple(json.loads(row["rounds_json"])),
        )

