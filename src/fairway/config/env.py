"""Environment-driven settings with logged fallbacks on bad values."""

from __future__ import annotations

import logging
import os

from .league import DEFAULT_LEAGUE_KEY, LeagueRules, get_league


logger = logging.getLogger(__name__)

ESPN_SCOREBOARD_URL = "https://site.api.espn.com/apis/site/v2/sports/golf/pga/scoreboard"

_LEAGUE_ENV = "FAIRWAY_LEAGUE"
_DB_PATH_ENV = "FAIRWAY_DB_PATH"
_FEED_URL_ENV = "FAIRWAY_FEED_URL"
_FEED_TIMEOUT_ENV = "FAIRWAY_FEED_TIMEOUT"
_CUT_FRACTION_ENV = "FAIRWAY_CUT_FRACTION"
_ODDS_API_KEY_ENV = "ODDS_API_KEY"

_FEED_TIMEOUT_DEFAULT = 10.0
_CUT_FRACTION_DEFAULT = 0.5


def _env_float(name: str, default: float, *, clamp_min: float | None = None, clamp_max: float | None = None) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid float for %s: %s; using default %.2f", name, raw, default)
        return default
    if clamp_min is not None:
        value = max(clamp_min, value)
    if clamp_max is not None:
        value = min(clamp_max, value)
    return value


def feed_url() -> str:
    return os.getenv(_FEED_URL_ENV) or ESPN_SCOREBOARD_URL


def feed_timeout() -> float:
    return _env_float(_FEED_TIMEOUT_ENV, _FEED_TIMEOUT_DEFAULT, clamp_min=0.5)


def cut_fraction() -> float:
    """Share of the field with 3+ round entries that signals the cut has happened."""

    return _env_float(_CUT_FRACTION_ENV, _CUT_FRACTION_DEFAULT, clamp_min=0.0, clamp_max=1.0)


def db_path() -> str | None:
    return os.getenv(_DB_PATH_ENV) or None


def odds_api_key() -> str | None:
    return os.getenv(_ODDS_API_KEY_ENV) or None


def configured_league() -> LeagueRules:
    key = os.getenv(_LEAGUE_ENV, DEFAULT_LEAGUE_KEY)
    try:
        return get_league(key)
    except KeyError:
        logger.warning("Unknown league %s in %s; using %s", key, _LEAGUE_ENV, DEFAULT_LEAGUE_KEY)
        return get_league(DEFAULT_LEAGUE_KEY)
