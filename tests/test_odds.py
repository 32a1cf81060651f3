import httpx
import pytest

from fairway.ingest import fetch_outright_odds
from fairway.ingest.odds import american_to_implied, best_prices, build_board, format_american


def _event(*books: list[tuple[str, int]]) -> dict:
    return {
        "bookmakers": [
            {"markets": [{"key": "outrights", "outcomes": [{"name": name, "price": price} for name, price in book]}]}
            for book in books
        ]
    }


def test_american_to_implied():
    assert american_to_implied(100) == pytest.approx(50.0)
    assert american_to_implied(300) == pytest.approx(25.0)
    assert american_to_implied(-200) == pytest.approx(66.6667, rel=1e-4)


def test_format_american():
    assert format_american(450) == "+450"
    assert format_american(-120) == "-120"


def test_best_prices_keeps_longest_price_per_golfer():
    event = _event([("Scottie Scheffler", 350), ("Rory McIlroy", 700)], [("Scottie Scheffler", 400)])
    event["bookmakers"][0]["markets"].append({"key": "h2h", "outcomes": [{"name": "Rory McIlroy", "price": 5000}]})

    assert best_prices(event) == {"Scottie Scheffler": 400, "Rory McIlroy": 700}


def test_build_board_sorts_favourites_first():
    board = build_board([_event([("Long Shot", 5000), ("Favourite", 300), ("Middle", 1200)])])

    assert board.source == "odds-api"
    assert [entry.name for entry in board.entries] == ["Favourite", "Middle", "Long Shot"]
    assert board.entries[0].odds == "+300"


def test_build_board_without_events_is_fallback():
    assert build_board([]).source == "espn-fallback"
    assert build_board([{"bookmakers": []}]).entries == []


def test_fetch_without_key_skips_network(monkeypatch):
    monkeypatch.delenv("ODDS_API_KEY", raising=False)

    def handler(request: httpx.Request) -> httpx.Response:  # pragma: no cover
        raise AssertionError("no request expected")

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        board = fetch_outright_odds(client)
    assert board.source == "espn-fallback"
    assert board.entries == []


def test_fetch_with_key_parses_events():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["apiKey"] == "secret"
        assert request.url.params["markets"] == "outrights"
        return httpx.Response(200, json=[_event([("Scottie Scheffler", 350)])])

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        board = fetch_outright_odds(client, api_key="secret")
    assert board.source == "odds-api"
    assert board.entries[0].name == "Scottie Scheffler"


@pytest.mark.parametrize(
    "response",
    [httpx.Response(401, json={"message": "bad key"}), httpx.Response(200, json={"not": "a list"})],
)
def test_fetch_failures_return_empty_board(response):
    with httpx.Client(transport=httpx.MockTransport(lambda request: response)) as client:
        board = fetch_outright_odds(client, api_key="secret")
    assert board.source == "espn-fallback"
    assert board.entries == []
