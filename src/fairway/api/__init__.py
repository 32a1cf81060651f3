"""REST API for the fairway league."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, List, NoReturn, Optional

import httpx
from fastapi import FastAPI, HTTPException
from fastapi.concurrency import run_in_threadpool

from fairway.api.schemas import (
    DraftResponse,
    PickRequest,
    ResultEditRequest,
    StandingsResponse,
    TournamentRequest,
)
from fairway.config import LeagueRules, configured_league
from fairway.ingest import OddsBoard, RawScoreboard, fetch_live_scores, fetch_outright_odds, fetch_scoreboard
from fairway.ingest.feed import debug_sample
from fairway.models import GolferScore, Pick, ResultRow, SeasonMoney, Tournament
from fairway.persistence import LeagueStore
from fairway.scoring import (
    available_golfers,
    build_pick_map,
    compute_money,
    compute_standings,
    current_drafter,
    snake_draft_order,
)


logger = logging.getLogger(__name__)

ScoreProvider = Callable[[], List[GolferScore]]
BoardProvider = Callable[[], RawScoreboard]
OddsProvider = Callable[[], OddsBoard]


def _raise_http(exc: Exception) -> NoReturn:
    if isinstance(exc, KeyError):
        detail = exc.args[0] if exc.args else "Not found"
        raise HTTPException(status_code=404, detail=str(detail)) from exc
    raise HTTPException(status_code=400, detail=str(exc)) from exc


def create_app(
    *,
    store: Optional[LeagueStore] = None,
    league: Optional[LeagueRules] = None,
    score_provider: Optional[ScoreProvider] = None,
    board_provider: Optional[BoardProvider] = None,
    odds_provider: Optional[OddsProvider] = None,
) -> FastAPI:
    app = FastAPI(title="fairway picks")
    league = league or (store.league if store is not None else configured_league())
    store = store or LeagueStore(Path(__file__).resolve().parent.parent / "fairway.sqlite", league=league)
    app.state.league_store = store
    scores_source: ScoreProvider = score_provider or fetch_live_scores
    board_source: BoardProvider = board_provider or fetch_scoreboard
    odds_source: OddsProvider = odds_provider or fetch_outright_odds

    async def current_scores() -> List[GolferScore]:
        return await run_in_threadpool(scores_source)

    def _tournament_or_404(tournament_id: str) -> Tournament:
        tournament = store.get_tournament(tournament_id)
        if tournament is None:
            raise HTTPException(status_code=404, detail="Tournament not found")
        return tournament

    async def _standings_for(tournament: Tournament | None) -> StandingsResponse:
        picks = store.list_picks(tournament.id) if tournament else []
        scores = await current_scores() if tournament else []
        standings = compute_standings(scores, build_pick_map(picks), league=league)
        return StandingsResponse(
            tournament=tournament,
            standings=standings,
            money=compute_money(standings, league=league),
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/scores", response_model=List[GolferScore])
    async def scores() -> List[GolferScore]:
        return await current_scores()

    @app.get("/scores/debug")
    async def scores_debug() -> dict[str, Any]:
        try:
            board = await run_in_threadpool(board_source)
        except (httpx.HTTPError, ValueError) as exc:
            return {"error": str(exc)}
        return debug_sample(board)

    @app.get("/odds", response_model=OddsBoard)
    async def odds() -> OddsBoard:
        return await run_in_threadpool(odds_source)

    @app.get("/standings", response_model=StandingsResponse)
    async def standings() -> StandingsResponse:
        return await _standings_for(store.active_tournament())

    @app.get("/golfers/available", response_model=List[GolferScore])
    async def golfers_available(search: str = "") -> List[GolferScore]:
        tournament = store.active_tournament()
        picks = store.list_picks(tournament.id) if tournament else []
        return available_golfers(await current_scores(), picks, search=search)

    @app.get("/draft", response_model=DraftResponse)
    async def draft() -> DraftResponse:
        tournament = store.active_tournament()
        if tournament is None:
            return DraftResponse(tournament=None, order=[], picks=[], on_the_clock=None, complete=False)
        order = snake_draft_order(tournament.draft_order, league.picks_per_player)
        picks = store.list_picks(tournament.id)
        drafter = current_drafter(order, len(picks))
        return DraftResponse(
            tournament=tournament,
            order=order,
            picks=picks,
            on_the_clock=drafter,
            complete=drafter is None,
        )

    @app.get("/tournaments/active", response_model=Optional[Tournament])
    async def active_tournament() -> Optional[Tournament]:
        return store.active_tournament()

    @app.post("/tournaments", response_model=Tournament)
    async def create_tournament(payload: TournamentRequest) -> Tournament:
        try:
            return store.create_tournament(
                name=payload.name,
                course=payload.course,
                date=payload.date,
                draft_order=payload.draft_order,
                is_major=payload.is_major,
            )
        except ValueError as exc:
            _raise_http(exc)

    @app.post("/tournaments/{tournament_id}/picks", response_model=Pick)
    async def make_pick(tournament_id: str, payload: PickRequest) -> Pick:
        _tournament_or_404(tournament_id)
        try:
            return store.add_pick(tournament_id, payload.golfer_name, as_player=payload.as_player)
        except (KeyError, ValueError) as exc:
            _raise_http(exc)

    @app.delete("/tournaments/{tournament_id}/picks/last", response_model=Optional[Pick])
    async def undo_pick(tournament_id: str) -> Optional[Pick]:
        _tournament_or_404(tournament_id)
        return store.undo_last_pick(tournament_id)

    @app.delete("/tournaments/{tournament_id}/picks")
    async def clear_picks(tournament_id: str) -> dict[str, int]:
        _tournament_or_404(tournament_id)
        return {"deleted": store.clear_picks(tournament_id)}

    @app.post("/tournaments/{tournament_id}/finalize", response_model=List[ResultRow])
    async def finalize(tournament_id: str) -> List[ResultRow]:
        tournament = _tournament_or_404(tournament_id)
        snapshot = await _standings_for(tournament)
        try:
            return store.finalize_tournament(tournament_id, snapshot.standings, snapshot.money)
        except (KeyError, ValueError) as exc:
            _raise_http(exc)

    @app.delete("/tournaments/{tournament_id}")
    async def delete_tournament(tournament_id: str) -> dict[str, str]:
        try:
            store.delete_tournament(tournament_id)
        except KeyError as exc:
            _raise_http(exc)
        return {"deleted": tournament_id}

    @app.get("/history")
    async def history() -> list[dict[str, Any]]:
        return store.history()

    @app.get("/history/golfers")
    async def golfer_history() -> list[dict[str, Any]]:
        return [row.model_dump() for row in store.list_golfer_results()]

    @app.get("/season-money", response_model=List[SeasonMoney])
    async def season_money() -> List[SeasonMoney]:
        return store.season_money()

    @app.patch("/results/{tournament_id}/{player_name}", response_model=ResultRow)
    async def edit_result(tournament_id: str, player_name: str, payload: ResultEditRequest) -> ResultRow:
        try:
            return store.edit_result(
                tournament_id,
                player_name,
                total_score=payload.total_score,
                money_won=payload.money_won,
            )
        except (KeyError, ValueError) as exc:
            _raise_http(exc)

    @app.delete("/results/{tournament_id}/{player_name}")
    async def delete_result(tournament_id: str, player_name: str) -> dict[str, str]:
        try:
            store.delete_result(tournament_id, player_name)
        except KeyError as exc:
            _raise_http(exc)
        return {"deleted": f"{tournament_id}/{player_name}"}

    return app
