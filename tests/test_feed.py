import httpx
import pytest

from fairway.ingest import FALLBACK_SCORES, RawCompetitor, fetch_live_scores, normalize, normalize_payload
from fairway.ingest.feed import FieldState, assign_positions, parse_strokes, parse_to_par


def _competitor(
    name: str | None,
    score: str | None = None,
    lines: list[dict] | None = None,
    *,
    status: str | None = None,
    thru: str | None = None,
    full_name: str | None = None,
) -> dict:
    athlete = {}
    if name is not None:
        athlete["displayName"] = name
    if full_name is not None:
        athlete["fullName"] = full_name
    payload: dict = {"athlete": athlete, "score": score, "linescores": lines or []}
    if status is not None:
        payload["status"] = {"type": {"name": status}}
    if thru is not None:
        payload["statistics"] = [{"name": "thru", "abbreviation": "THRU", "displayValue": thru}]
    return payload


def _done(*strokes: int) -> list[dict]:
    return [{"value": float(value), "displayValue": str(value - 72)} for value in strokes]


def _normalize(competitors: list[dict], **kwargs):
    raw = [RawCompetitor.model_validate(item) for item in competitors]
    return normalize(raw, cut_threshold=kwargs.pop("cut_threshold", 0.5), **kwargs)


def _scoreboard(competitors: list[dict]) -> dict:
    return {"events": [{"name": "Test Open", "competitions": [{"competitors": competitors}]}]}


def test_parse_strokes_accepts_only_plausible_rounds():
    assert parse_strokes(68.0).value == 68
    assert parse_strokes("95.4").value == 95
    assert parse_strokes(54.6).value == 55
    assert parse_strokes(96).state is FieldState.MALFORMED
    assert parse_strokes(54.4).state is FieldState.MALFORMED
    assert parse_strokes(0).state is FieldState.MALFORMED
    assert parse_strokes("abc").state is FieldState.MALFORMED
    assert parse_strokes(None).state is FieldState.ABSENT


def test_parse_to_par_handles_even_and_signs():
    assert parse_to_par("E").value == 0
    assert parse_to_par("+2").value == 2
    assert parse_to_par("-4").value == -4
    assert parse_to_par("--").state is FieldState.MALFORMED
    assert parse_to_par("").state is FieldState.ABSENT


def test_round_extraction_drops_out_of_range_values():
    field = [
        _competitor("Alpha", "-4", [{"value": 68.0}, {"value": 95.4}, {"value": 96.0}, {"value": 54.4}]),
        _competitor("Bravo", "-2", _done(70)),
        _competitor("Charlie", "-1", _done(71)),
        _competitor("Delta", "E", _done(72)),
        _competitor("Echo", "+1", _done(73)),
    ]

    alpha = _normalize(field)[0]
    assert alpha.rounds == (68, 95, None, None)


def test_too_few_competitors_serves_fallback():
    field = [_competitor(name, "-1", _done(71)) for name in ("A", "B", "C")]

    scores = _normalize(field)
    assert len(scores) >= 5
    assert scores == list(FALLBACK_SCORES)


def test_empty_or_malformed_payload_serves_fallback():
    assert normalize_payload({"events": []}) == list(FALLBACK_SCORES)
    assert normalize_payload({"events": [{"competitions": []}]}) == list(FALLBACK_SCORES)
    assert normalize_payload({"events": "nope"}) == list(FALLBACK_SCORES)


def test_output_keeps_feed_order_and_cardinality():
    field = [
        _competitor("Zed", "+3", _done(75)),
        _competitor("Amy", "-5", _done(67)),
        _competitor("Bo", "-1", _done(71)),
        _competitor("Cy", "E", _done(72)),
        _competitor("Di", "-2", _done(70)),
        _competitor("Ed", "+1", _done(73)),
    ]

    scores = _normalize(field)
    assert [golfer.name for golfer in scores] == ["Zed", "Amy", "Bo", "Cy", "Di", "Ed"]
    assert [golfer.position for golfer in scores] == ["6", "1", "3", "4", "2", "5"]


def test_positions_share_tie_rank_and_skip_past_group():
    field = [
        _competitor("Leader", "-10", _done(62)),
        _competitor("Tie One", "-8", _done(64)),
        _competitor("Tie Two", "-8", _done(64)),
        _competitor("Tie Three", "-8", _done(64)),
        _competitor("Chaser", "-5", _done(67)),
        _competitor("Gone", "-20", _done(70, 70), status="STATUS_CUT"),
    ]

    positions = [golfer.position for golfer in _normalize(field)]
    assert positions == ["1", "T2", "T2", "T2", "5", "CUT"]


def test_assign_positions_ignores_inactive_and_ranks_unknown_last():
    positions = assign_positions([-3, None, -3, -9, 0], ["active", "active", "active", "wd", "active"])
    assert positions == ["T1", "4", "T1", "WD", "3"]


def test_status_descriptor_marks_cut_and_withdrawn():
    field = [
        _competitor("Cut Guy", "+9", _done(75, 74), status="STATUS_CUT"),
        _competitor("Hurt Guy", "+4", _done(76), status="STATUS_WITHDRAWN"),
        _competitor("Also Out", "+4", _done(76), status="WD"),
        _competitor("Fine", "-1", _done(71)),
        _competitor("Fine Too", "-2", _done(70)),
    ]

    scores = _normalize(field)
    assert [golfer.status for golfer in scores] == ["cut", "wd", "wd", "active", "active"]
    assert scores[0].thru == "CUT"
    assert scores[1].thru == "WD"
    assert scores[1].position == "WD"


def test_field_shape_marks_two_round_golfers_cut_after_weekend_starts():
    weekend = _done(70, 70) + [{"value": 0, "displayValue": "-1"}]
    field = [
        _competitor("Weekend A", "-5", weekend),
        _competitor("Weekend B", "-4", weekend),
        _competitor("Weekend C", "-3", weekend),
        _competitor("Weekend D", "-2", weekend),
        _competitor("Missed A", "+4", _done(74, 74)),
        _competitor("Missed B", "+6", _done(75, 75)),
    ]

    scores = _normalize(field)
    assert [golfer.status for golfer in scores[:4]] == ["active"] * 4
    assert [golfer.status for golfer in scores[4:]] == ["cut", "cut"]


def test_two_round_golfers_stay_active_before_weekend():
    field = [_competitor(f"Player {idx}", "-1", _done(70, 73)) for idx in range(6)]

    scores = _normalize(field)
    assert all(golfer.status == "active" for golfer in scores)
    assert all(golfer.position == "T1" for golfer in scores)


def test_cut_score_recomputed_from_first_two_rounds_and_weekend_cleared():
    field = [
        _competitor("Stray", "+2", _done(75, 74, 70, 71), status="STATUS_CUT"),
        _competitor("A", "-4", _done(68)),
        _competitor("B", "-3", _done(69)),
        _competitor("C", "-2", _done(70)),
        _competitor("D", "-1", _done(71)),
    ]

    stray = _normalize(field)[0]
    assert stray.score == 75 + 74 - 2 * 72
    assert stray.rounds == (75, 74, None, None)
    assert stray.today == 74 - 72


def test_withdrawn_score_recomputed_when_first_two_rounds_known():
    field = [
        _competitor("Quit", "+1", _done(77, 78) + [{"value": 0, "displayValue": "+3"}], status="STATUS_WD"),
        _competitor("A", "-4", _done(68)),
        _competitor("B", "-3", _done(69)),
        _competitor("C", "-2", _done(70)),
        _competitor("D", "-1", _done(71)),
    ]

    quit_ = _normalize(field)[0]
    assert quit_.status == "wd"
    assert quit_.score == 11


def test_today_and_thru_for_in_progress_round():
    in_progress = _done(68, 70) + [{"value": 0, "displayValue": "E"}]
    field = [
        _competitor("On Course", "-6", in_progress, thru="14"),
        _competitor("Placeholder Thru", "-5", _done(68, 71) + [{"value": 0, "displayValue": "-2"}], thru="--"),
        _competitor("Finished", "-4", _done(70, 70), thru="-"),
        _competitor("Not Started", None, []),
        _competitor("Also Done", "-1", _done(71, 72)),
    ]

    scores = _normalize(field, cut_threshold=1.0)
    on_course, placeholder, finished, not_started, also_done = scores
    assert on_course.today == 0
    assert on_course.thru == "14"
    assert placeholder.today == -2
    assert placeholder.thru == "—"
    assert finished.today == -2
    assert finished.thru == "F"
    assert not_started.today is None
    assert not_started.score is None
    assert not_started.thru == "—"
    assert also_done.today == 0


def test_thru_read_from_alternate_statistic_names():
    field = [
        _competitor("Holes", "-1", _done(71) + [{"value": 0, "displayValue": "-1"}]),
        _competitor("B", "-1", _done(71)),
        _competitor("C", "-1", _done(71)),
        _competitor("D", "-1", _done(71)),
        _competitor("E", "-1", _done(71)),
    ]
    field[0]["statistics"] = [
        {"name": "scoreToPar", "displayValue": "-2"},
        {"name": "holesPlayed", "abbreviation": "HOLES", "displayValue": "9"},
    ]

    assert _normalize(field, cut_threshold=1.0)[0].thru == "9"


def test_unhashable_statistic_fields_are_ignored():
    field = [_competitor(f"Golfer {idx}", f"-{idx}", _done(72 - idx)) for idx in range(5)]
    field[0]["statistics"] = [
        {"name": ["thru"], "displayValue": "9"},
        {"name": {"odd": 1}, "abbreviation": ["THRU"], "displayValue": "4"},
    ]

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=_scoreboard(field))

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        scores = fetch_live_scores(client, url="https://feed.test/scoreboard")

    assert scores != list(FALLBACK_SCORES)
    assert scores[0].name == "Golfer 0"
    assert scores[0].thru == "F"


def test_name_resolution_prefers_display_name():
    field = [
        _competitor("Display", "-1", _done(71), full_name="Full"),
        _competitor(None, "-1", _done(71), full_name="Only Full"),
        _competitor(None, "-1", _done(71)),
        _competitor("D", "-1", _done(71)),
        _competitor("E", "-1", _done(71)),
    ]

    names = [golfer.name for golfer in _normalize(field)]
    assert names[:3] == ["Display", "Only Full", "Unknown"]


def test_par_derived_from_four_round_golfer():
    field = [
        _competitor("Four Rounds", "-4", [{"value": 70.0}] * 4),
        _competitor("B", "-1", _done(70, 70, 70)),
        _competitor("C", "E", _done(70, 70, 71)),
        _competitor("D", "+1", _done(70, 71, 71)),
        _competitor("E", "+2", _done(71, 71, 71)),
    ]

    scores = _normalize(field)
    assert {golfer.par for golfer in scores} == {71}
    assert scores[1].today == 70 - 71


def test_fetch_live_scores_normalizes_successful_response():
    field = [_competitor(f"Golfer {idx}", f"-{idx}", _done(72 - idx)) for idx in range(6)]

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=_scoreboard(field))

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        scores = fetch_live_scores(client, url="https://feed.test/scoreboard")

    assert len(scores) == 6
    assert scores[5].position == "1"


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(503),
        httpx.Response(200, content=b"<html>not json</html>"),
        httpx.Response(200, json={"events": [{"competitions": [{"competitors": "bad"}]}]}),
    ],
)
def test_fetch_live_scores_falls_back_on_failures(response):
    def handler(request: httpx.Request) -> httpx.Response:
        return response

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        scores = fetch_live_scores(client, url="https://feed.test/scoreboard")

    assert scores == list(FALLBACK_SCORES)


def test_fetch_live_scores_falls_back_when_unreachable():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("down", request=request)

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        assert fetch_live_scores(client, url="https://feed.test/scoreboard") == list(FALLBACK_SCORES)


def test_made_cut_did_not_finish_description_is_not_a_cut():
    field = [
        _competitor("Mdf", "-8", _done(66, 66, 76)),
        _competitor("B", "-6", _done(70, 70, 70)),
        _competitor("C", "-6", _done(70, 70, 70)),
        _competitor("D", "-6", _done(70, 70, 70)),
        _competitor("E", "-6", _done(70, 70, 70)),
    ]
    field[0]["status"] = {"type": {"name": "STATUS_MDF", "description": "Made Cut Did Not Finish"}}

    mdf = _normalize(field)[0]
    assert mdf.status == "active"
    assert mdf.position == "1"
    assert mdf.rounds == (66, 66, 76, None)
    assert mdf.score == -8


def test_status_description_alone_can_mark_withdrawn_or_cut():
    field = [
        _competitor("Quit", "+4", _done(76)),
        _competitor("Missed", "+6", _done(75, 75)),
        _competitor("C", "-1", _done(71)),
        _competitor("D", "-1", _done(71)),
        _competitor("E", "-1", _done(71)),
    ]
    field[0]["status"] = {"type": {"name": "STATUS_OTHER", "description": "Withdrawn"}}
    field[1]["status"] = {"type": {"name": "STATUS_OTHER", "description": " cut "}}

    scores = _normalize(field)
    assert [golfer.status for golfer in scores[:2]] == ["wd", "cut"]
    assert [golfer.position for golfer in scores[:2]] == ["WD", "CUT"]


def test_wrapped_total_falls_back_to_value_when_display_blank():
    field = [_competitor(f"Golfer {idx}", None, _done(71)) for idx in range(6)]
    for idx, competitor in enumerate(field):
        competitor["score"] = {"value": -idx, "displayValue": None}
    field[5]["score"] = {"value": 3, "displayValue": "E"}

    scores = _normalize(field)
    assert [golfer.score for golfer in scores] == [0, -1, -2, -3, -4, 0]
    assert scores[4].position == "1"
