"""Fetch the PGA scoreboard feed and normalize it into per-golfer records.

The feed is loosely structured: totals arrive as free-form strings, round
entries mix completed stroke counts with in-progress to-par values, and the
hole count for the current round lives under whichever statistic name the
provider used that season. Every raw field is parsed into a :class:`Parsed`
value that records whether it was present and well-formed, present but
malformed, or absent, and the normalizer applies its fallback rules from that.

:func:`fetch_live_scores` never raises for bad feed data. Any transport error,
malformed payload, or undersized field yields :data:`FALLBACK_SCORES`.
"""

from __future__ import annotations

import logging
import math
import re
from bisect import bisect_left, bisect_right
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, List, Mapping, Optional, Sequence, Tuple, TypeVar

import httpx
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic.config import ConfigDict

from fairway.config import env
from fairway.models import DEFAULT_PAR, GolferScore, GolferStatus


logger = logging.getLogger(__name__)

T = TypeVar("T")

MIN_COMPETITORS = 5
MAX_ROUNDS = 4
MIN_ROUND_STROKES = 55
MAX_ROUND_STROKES = 95
PAR_BOUNDS = (69, 74)

THRU_STAT_NAMES = frozenset({"thru", "holesPlayed"})
THRU_STAT_ABBREVIATIONS = frozenset({"THRU", "HOLES"})
THRU_PLACEHOLDERS = frozenset({"--", "-"})
UNKNOWN_THRU = "—"
UNKNOWN_NAME = "Unknown"
CUT_TOKENS = frozenset({"CUT"})
WD_TOKENS = frozenset({"WD", "WITHDRAWN", "WITHDREW"})
_STATUS_TOKEN_SPLIT = re.compile(r"[^A-Z0-9]+")


FALLBACK_SCORES: Tuple[GolferScore, ...] = (
    GolferScore(name="Scottie Scheffler", position="1", score=-14, today=-3, thru="F", status="active", rounds=(67, 66, 69, None)),
    GolferScore(name="Rory McIlroy", position="T2", score=-12, today=-3, thru="F", status="active", rounds=(68, 67, 69, None)),
    GolferScore(name="Xander Schauffele", position="T2", score=-12, today=-4, thru="F", status="active", rounds=(67, 69, 68, None)),
    GolferScore(name="Collin Morikawa", position="4", score=-10, today=-3, thru="F", status="active", rounds=(69, 68, 69, None)),
    GolferScore(name="Ludvig Åberg", position="5", score=-9, today=-4, thru="F", status="active", rounds=(69, 70, 68, None)),
    GolferScore(name="Tommy Fleetwood", position="6", score=-8, today=-3, thru="F", status="active", rounds=(68, 71, 69, None)),
    GolferScore(name="Cameron Young", position="7", score=-7, today=-4, thru="F", status="active", rounds=(70, 71, 68, None)),
    GolferScore(name="Jon Rahm", position="CUT", score=6, today=3, thru="CUT", status="cut", rounds=(75, 75, None, None)),
    GolferScore(name="Tony Finau", position="CUT", score=8, today=4, thru="CUT", status="cut", rounds=(76, 76, None, None)),
)


class FieldState(str, Enum):
    PRESENT = "present"
    MALFORMED = "malformed"
    ABSENT = "absent"


@dataclass(frozen=True)
class Parsed(Generic[T]):
    """Outcome of reading one raw feed field."""

    state: FieldState
    value: Optional[T] = None
    raw: Any = None

    @property
    def ok(self) -> bool:
        return self.state is FieldState.PRESENT

    @classmethod
    def present(cls, value: T, raw: Any = None) -> "Parsed[T]":
        return cls(FieldState.PRESENT, value, raw)

    @classmethod
    def malformed(cls, raw: Any) -> "Parsed[T]":
        return cls(FieldState.MALFORMED, None, raw)

    @classmethod
    def absent(cls) -> "Parsed[T]":
        return cls(FieldState.ABSENT)


def _is_blank(raw: Any) -> bool:
    return raw is None or (isinstance(raw, str) and not raw.strip())


def parse_to_par(raw: Any) -> Parsed[int]:
    """Parse a to-par value such as ``"-4"``, ``"+2"``, ``"E"`` or ``-4.0``."""

    if _is_blank(raw):
        return Parsed.absent()
    if isinstance(raw, bool):
        return Parsed.malformed(raw)
    if isinstance(raw, (int, float)):
        if isinstance(raw, float) and not math.isfinite(raw):
            return Parsed.malformed(raw)
        return Parsed.present(int(round(raw)), raw)
    text = str(raw).strip().upper()
    if text == "E":
        return Parsed.present(0, raw)
    try:
        value = float(text)
    except ValueError:
        return Parsed.malformed(raw)
    if not math.isfinite(value):
        return Parsed.malformed(raw)
    return Parsed.present(int(round(value)), raw)


def parse_strokes(raw: Any) -> Parsed[int]:
    """Parse a completed round's stroke count, rejecting values outside 55-95."""

    if _is_blank(raw):
        return Parsed.absent()
    if isinstance(raw, bool):
        return Parsed.malformed(raw)
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return Parsed.malformed(raw)
    if not math.isfinite(value):
        return Parsed.malformed(raw)
    strokes = int(round(value))
    if strokes < MIN_ROUND_STROKES or strokes > MAX_ROUND_STROKES:
        return Parsed.malformed(raw)
    return Parsed.present(strokes, raw)


class _RawModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


class RawAthlete(_RawModel):
    display_name: Any = Field(default=None, alias="displayName")
    full_name: Any = Field(default=None, alias="fullName")


class RawStatusType(_RawModel):
    name: Any = None
    description: Any = None


class RawStatus(_RawModel):
    type: Optional[RawStatusType] = None


class RawLine(_RawModel):
    value: Any = None
    display_value: Any = Field(default=None, alias="displayValue")


class RawStatistic(_RawModel):
    name: Any = None
    abbreviation: Any = None
    display_value: Any = Field(default=None, alias="displayValue")


class RawCompetitor(_RawModel):
    athlete: Optional[RawAthlete] = None
    score: Any = None
    status: Optional[RawStatus] = None
    linescores: List[RawLine] = Field(default_factory=list)
    statistics: List[RawStatistic] = Field(default_factory=list)

    @field_validator("linescores", "statistics", mode="before")
    @classmethod
    def _null_as_empty(cls, value):
        return [] if value is None else value

    def resolved_name(self) -> str:
        if self.athlete is not None:
            for candidate in (self.athlete.display_name, self.athlete.full_name):
                if isinstance(candidate, str) and candidate.strip():
                    return candidate.strip()
        return UNKNOWN_NAME

    def total_score(self) -> Parsed[int]:
        raw = self.score
        # Some feed versions wrap the total as {"value": ..., "displayValue": ...}.
        if isinstance(raw, Mapping):
            display = raw.get("displayValue")
            raw = raw.get("value") if _is_blank(display) else display
        return parse_to_par(raw)

    def status_hint(self) -> Optional[GolferStatus]:
        """Status stated outright by the feed, if it says cut or withdrawn.

        The type name decides on whole tokens (``STATUS_CUT``, ``WD``); the
        description only when it is nothing but the status word, so text such
        as "Made Cut Did Not Finish" is left to the field-shape rule.
        """

        status_type = self.status.type if self.status is not None else None
        if status_type is None:
            return None
        if isinstance(status_type.name, str):
            tokens = set(_STATUS_TOKEN_SPLIT.split(status_type.name.upper()))
            if "MADE" not in tokens:
                if tokens & CUT_TOKENS:
                    return "cut"
                if tokens & WD_TOKENS:
                    return "wd"
        if isinstance(status_type.description, str):
            description = status_type.description.strip().upper()
            if description in CUT_TOKENS:
                return "cut"
            if description in WD_TOKENS:
                return "wd"
        return None

    def thru_stat(self) -> Parsed[str]:
        for stat in self.statistics:
            name = stat.name if isinstance(stat.name, str) else None
            abbreviation = stat.abbreviation if isinstance(stat.abbreviation, str) else None
            if name in THRU_STAT_NAMES or abbreviation in THRU_STAT_ABBREVIATIONS:
                raw = stat.display_value
                if _is_blank(raw):
                    return Parsed.absent()
                text = str(raw).strip()
                if text in THRU_PLACEHOLDERS:
                    return Parsed.malformed(raw)
                return Parsed.present(text, raw)
        return Parsed.absent()


class RawCompetition(_RawModel):
    competitors: List[RawCompetitor] = Field(default_factory=list)

    @field_validator("competitors", mode="before")
    @classmethod
    def _null_as_empty(cls, value):
        return [] if value is None else value


class RawEvent(_RawModel):
    name: Any = None
    competitions: List[RawCompetition] = Field(default_factory=list)

    @field_validator("competitions", mode="before")
    @classmethod
    def _null_as_empty(cls, value):
        return [] if value is None else value


class RawScoreboard(_RawModel):
    events: List[RawEvent] = Field(default_factory=list)

    @field_validator("events", mode="before")
    @classmethod
    def _null_as_empty(cls, value):
        return [] if value is None else value

    def competitors(self) -> List[RawCompetitor]:
        """Competitors of the first competition of the first event, or empty."""

        if not self.events or not self.events[0].competitions:
            return []
        return list(self.events[0].competitions[0].competitors)


@dataclass(frozen=True)
class RoundLines:
    """What a competitor's round entries say before status is known."""

    rounds: Tuple[Optional[int], Optional[int], Optional[int], Optional[int]]
    entries: int
    active_round: Optional[int] = None
    active_to_par: Optional[int] = None

    @property
    def completed(self) -> int:
        return sum(1 for value in self.rounds if value is not None)


def read_round_lines(competitor: RawCompetitor) -> RoundLines:
    rounds: List[Optional[int]] = [None] * MAX_ROUNDS
    active_round: Optional[int] = None
    active_to_par: Optional[int] = None
    for idx, line in enumerate(competitor.linescores[:MAX_ROUNDS]):
        strokes = parse_strokes(line.value)
        if strokes.ok:
            rounds[idx] = strokes.value
            continue
        # Not a finished round; an in-progress one still carries its to-par.
        to_par = parse_to_par(line.display_value)
        if to_par.ok:
            active_round = idx
            active_to_par = to_par.value
        elif to_par.state is FieldState.MALFORMED:
            logger.debug(
                "Ignoring round %s entry for %s: value=%r displayValue=%r",
                idx + 1,
                competitor.resolved_name(),
                line.value,
                line.display_value,
            )
    return RoundLines(
        rounds=tuple(rounds),  # type: ignore[arg-type]
        entries=len(competitor.linescores),
        active_round=active_round,
        active_to_par=active_to_par,
    )


def derive_par(competitors: Sequence[RawCompetitor], lines: Sequence[RoundLines]) -> int:
    """Infer course par from any golfer with four rounds and a known total."""

    low, high = PAR_BOUNDS
    for competitor, line in zip(competitors, lines):
        if line.completed != MAX_ROUNDS:
            continue
        total = competitor.total_score()
        if not total.ok:
            continue
        strokes = sum(value for value in line.rounds if value is not None)
        implied = round((strokes - total.value) / MAX_ROUNDS)
        if low <= implied <= high:
            if implied != DEFAULT_PAR:
                logger.info("Derived course par %s from %s", implied, competitor.resolved_name())
            return implied
    return DEFAULT_PAR


def field_has_cut(lines: Sequence[RoundLines], threshold: float) -> bool:
    """True once more than ``threshold`` of the field has three or more round entries."""

    if not lines:
        return False
    weekend = sum(1 for line in lines if line.entries >= 3)
    return weekend / len(lines) > threshold


def classify_status(competitor: RawCompetitor, line: RoundLines, cut_made: bool) -> GolferStatus:
    hint = competitor.status_hint()
    if hint is not None:
        return hint
    if cut_made and line.entries == 2:
        return "cut"
    return "active"


def assign_positions(
    scores: Sequence[Optional[int]],
    statuses: Sequence[GolferStatus],
) -> List[str]:
    """Rank active golfers by total; cut and withdrawn golfers never take a number.

    Unknown totals rank behind every known total.
    """

    def sort_value(score: Optional[int]) -> float:
        return math.inf if score is None else float(score)

    active_values = sorted(
        sort_value(score) for score, status in zip(scores, statuses) if status == "active"
    )
    positions: List[str] = []
    for score, status in zip(scores, statuses):
        if status == "cut":
            positions.append("CUT")
            continue
        if status == "wd":
            positions.append("WD")
            continue
        value = sort_value(score)
        ahead = bisect_left(active_values, value)
        tied = bisect_right(active_values, value) - ahead
        rank = ahead + 1
        positions.append(f"T{rank}" if tied > 1 else str(rank))
    return positions


def _last_completed(rounds: Sequence[Optional[int]]) -> Optional[int]:
    for value in reversed(rounds):
        if value is not None:
            return value
    return None


def normalize(
    competitors: Sequence[RawCompetitor],
    *,
    cut_threshold: Optional[float] = None,
) -> List[GolferScore]:
    """Turn raw competitors into golfer records, in feed order.

    Fewer than :data:`MIN_COMPETITORS` competitors returns the fallback set.
    """

    if len(competitors) < MIN_COMPETITORS:
        logger.warning(
            "Feed returned %s competitors (minimum %s); serving fallback scores",
            len(competitors),
            MIN_COMPETITORS,
        )
        return list(FALLBACK_SCORES)

    threshold = env.cut_fraction() if cut_threshold is None else cut_threshold
    lines = [read_round_lines(competitor) for competitor in competitors]
    par = derive_par(competitors, lines)
    cut_made = field_has_cut(lines, threshold)
    statuses = [
        classify_status(competitor, line, cut_made) for competitor, line in zip(competitors, lines)
    ]
    totals = [competitor.total_score() for competitor in competitors]
    positions = assign_positions([total.value for total in totals], statuses)

    records: List[GolferScore] = []
    for competitor, line, status, total, position in zip(competitors, lines, statuses, totals, positions):
        name = competitor.resolved_name()
        rounds = list(line.rounds)
        if total.state is FieldState.MALFORMED:
            logger.warning("Unparseable total %r for %s", total.raw, name)
        score = total.value

        if status == "cut":
            rounds[2] = None
            rounds[3] = None
        if status != "active" and rounds[0] is not None and rounds[1] is not None:
            score = rounds[0] + rounds[1] - 2 * par

        if status == "active" and line.active_round is not None:
            today = line.active_to_par
        else:
            last = _last_completed(rounds)
            today = None if last is None else last - par

        if status == "cut":
            thru = "CUT"
        elif status == "wd":
            thru = "WD"
        else:
            stat = competitor.thru_stat()
            if stat.ok:
                thru = stat.value
            elif line.active_round is None and line.completed > 0:
                thru = "F"
            else:
                thru = UNKNOWN_THRU

        records.append(
            GolferScore(
                name=name,
                position=position,
                score=score,
                today=today,
                thru=thru,
                status=status,
                rounds=tuple(rounds),
                par=par,
            )
        )
    return records


def normalize_payload(payload: Any, *, cut_threshold: Optional[float] = None) -> List[GolferScore]:
    """Validate a decoded scoreboard document and normalize it."""

    try:
        board = RawScoreboard.model_validate(payload)
    except ValidationError as exc:
        logger.warning("Malformed scoreboard payload (%s errors); serving fallback scores", exc.error_count())
        return list(FALLBACK_SCORES)
    return normalize(board.competitors(), cut_threshold=cut_threshold)


def fetch_scoreboard(
    client: Optional[httpx.Client] = None,
    *,
    url: Optional[str] = None,
    timeout: Optional[float] = None,
) -> RawScoreboard:
    """Single GET of the scoreboard; raises on transport or shape errors."""

    target = url or env.feed_url()
    wait = env.feed_timeout() if timeout is None else timeout
    if client is None:
        with httpx.Client(timeout=wait) as owned:
            response = owned.get(target, headers={"Cache-Control": "no-store"})
    else:
        response = client.get(target, headers={"Cache-Control": "no-store"}, timeout=wait)
    response.raise_for_status()
    return RawScoreboard.model_validate(response.json())


def fetch_live_scores(
    client: Optional[httpx.Client] = None,
    *,
    url: Optional[str] = None,
    timeout: Optional[float] = None,
) -> List[GolferScore]:
    """Fetch and normalize the live scoreboard; always returns records."""

    try:
        board = fetch_scoreboard(client, url=url, timeout=timeout)
    except httpx.HTTPError as exc:
        logger.warning("Scoreboard fetch failed: %s; serving fallback scores", exc)
        return list(FALLBACK_SCORES)
    except ValueError as exc:
        # Invalid JSON and pydantic ValidationError are both ValueErrors.
        logger.warning("Scoreboard payload unusable: %s; serving fallback scores", exc)
        return list(FALLBACK_SCORES)
    return normalize(board.competitors())


def _debug_entry(competitor: RawCompetitor) -> dict[str, Any]:
    status_type = competitor.status.type if competitor.status is not None else None
    return {
        "name": competitor.resolved_name(),
        "score": competitor.score,
        "status_type_name": status_type.name if status_type else None,
        "status_type_description": status_type.description if status_type else None,
        "linescores": [
            {"value": line.value, "displayValue": line.display_value} for line in competitor.linescores
        ],
        "statistics": [
            {"name": stat.name, "abbreviation": stat.abbreviation, "displayValue": stat.display_value}
            for stat in competitor.statistics
        ],
    }


def debug_sample(board: RawScoreboard, *, head: int = 6, tail: int = 3) -> dict[str, Any]:
    """Trimmed raw view of the leaders and the bottom of the field."""

    competitors = board.competitors()
    return {
        "total": len(competitors),
        "first": [_debug_entry(competitor) for competitor in competitors[:head]],
        "last": [_debug_entry(competitor) for competitor in competitors[-tail:]] if tail else [],
    }
