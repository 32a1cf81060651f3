"""Outright (to-win) odds for the current PGA Tour event."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel
from pydantic.config import ConfigDict

from fairway.config import env


logger = logging.getLogger(__name__)

ODDS_API_URL = "https://api.the-odds-api.com/v4/sports/golf_pga_tour/odds"
ODDS_SOURCE = "odds-api"
FALLBACK_SOURCE = "espn-fallback"


class OddsEntry(BaseModel):
    name: str
    odds: str
    implied_prob: float

    model_config = ConfigDict(frozen=True)


class OddsBoard(BaseModel):
    source: str
    entries: List[OddsEntry]

    model_config = ConfigDict(frozen=True)


def american_to_implied(odds: int) -> float:
    """Implied win probability (0-100) of an American price."""

    if odds > 0:
        return 100 / (odds + 100) * 100
    return abs(odds) / (abs(odds) + 100) * 100


def format_american(odds: int) -> str:
    return f"+{odds}" if odds > 0 else str(odds)


def best_prices(event: Dict[str, Any]) -> Dict[str, int]:
    """Most favourable outright price per golfer across all bookmakers."""

    prices: Dict[str, int] = {}
    for bookmaker in event.get("bookmakers") or []:
        for market in bookmaker.get("markets") or []:
            if market.get("key") != "outrights":
                continue
            for outcome in market.get("outcomes") or []:
                name = outcome.get("name")
                price = outcome.get("price")
                if not name or not isinstance(price, (int, float)) or isinstance(price, bool):
                    continue
                price = int(price)
                if name not in prices or price > prices[name]:
                    prices[name] = price
    return prices


def build_board(events: List[Dict[str, Any]]) -> OddsBoard:
    if not events:
        return OddsBoard(source=FALLBACK_SOURCE, entries=[])
    prices = best_prices(events[0])
    entries = sorted(
        (
            OddsEntry(name=name, odds=format_american(price), implied_prob=american_to_implied(price))
            for name, price in prices.items()
        ),
        key=lambda entry: entry.implied_prob,
        reverse=True,
    )
    if not entries:
        return OddsBoard(source=FALLBACK_SOURCE, entries=[])
    return OddsBoard(source=ODDS_SOURCE, entries=entries)


def fetch_outright_odds(
    client: Optional[httpx.Client] = None,
    *,
    api_key: Optional[str] = None,
) -> OddsBoard:
    """Fetch outright odds; without a key or on any failure the board is empty."""

    key = api_key or env.odds_api_key()
    if not key:
        return OddsBoard(source=FALLBACK_SOURCE, entries=[])
    params = {"apiKey": key, "regions": "us", "markets": "outrights", "oddsFormat": "american"}
    try:
        if client is None:
            with httpx.Client(timeout=env.feed_timeout()) as owned:
                response = owned.get(ODDS_API_URL, params=params)
        else:
            response = client.get(ODDS_API_URL, params=params)
        response.raise_for_status()
        payload = response.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning("Odds fetch failed: %s", exc)
        return OddsBoard(source=FALLBACK_SOURCE, entries=[])
    if not isinstance(payload, list):
        logger.warning("Unexpected odds payload type %s", type(payload).__name__)
        return OddsBoard(source=FALLBACK_SOURCE, entries=[])
    return build_board([event for event in payload if isinstance(event, dict)])
