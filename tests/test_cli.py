import json

import pytest

from fairway.cli import load_picks_csv, main
from fairway.ingest import FALLBACK_SCORES


def _write_league(tmp_path):
    path = tmp_path / "league.json"
    path.write_text(json.dumps({"name": "TEST", "roster": ["Ann", "Bob"], "picks_per_player": 2}), encoding="utf-8")
    return path


def _write_picks(tmp_path):
    path = tmp_path / "picks.csv"
    path.write_text(
        "player_name,golfer_name,pick_order\n"
        "Ann,Tommy Fleetwood,4\n"
        "Ann,Scottie Scheffler,1\n"
        "Bob,Rory McIlroy,2\n"
        "Bob,Jon Rahm,3\n",
        encoding="utf-8",
    )
    return path


def _write_feed(tmp_path):
    path = tmp_path / "feed.json"
    path.write_text(json.dumps({"events": []}), encoding="utf-8")
    return path


def test_load_picks_csv_orders_by_pick_order(tmp_path):
    picks = load_picks_csv(_write_picks(tmp_path))

    assert [pick.golfer_name for pick in picks] == [
        "Scottie Scheffler",
        "Rory McIlroy",
        "Jon Rahm",
        "Tommy Fleetwood",
    ]


def test_load_picks_csv_requires_both_columns(tmp_path):
    path = tmp_path / "picks.csv"
    path.write_text("player_name,golfer_name\nAnn,\n", encoding="utf-8")

    with pytest.raises(ValueError, match="required"):
        load_picks_csv(path)


def test_draft_command_prints_snake_order(capsys):
    main(["draft", "A", "B", "C", "--picks-per-player", "2"])

    lines = capsys.readouterr().out.strip().splitlines()
    assert [line.split()[-1] for line in lines] == ["A", "B", "C", "C", "B", "A"]
    assert lines[3].split()[1] == "R2"


def test_scores_command_emits_json(tmp_path, capsys):
    main(["scores", "--feed", str(_write_feed(tmp_path)), "--json"])

    rows = json.loads(capsys.readouterr().out)
    assert [row["name"] for row in rows] == [golfer.name for golfer in FALLBACK_SCORES]


def test_standings_command_writes_output(tmp_path, capsys):
    output = tmp_path / "standings.json"
    saved = tmp_path / "saved.json"
    main(
        [
            "standings",
            "--picks",
            str(_write_picks(tmp_path)),
            "--feed",
            str(_write_feed(tmp_path)),
            "--league-file",
            str(_write_league(tmp_path)),
            "--save-league",
            str(saved),
            "--output",
            str(output),
        ]
    )

    out = capsys.readouterr().out
    assert " 1. Ann" in out
    assert "+$20" in out
    payload = json.loads(output.read_text(encoding="utf-8"))
    assert payload["money"] == {"Ann": 20, "Bob": -20}
    assert [row["player"] for row in payload["standings"]] == ["Ann", "Bob"]
    assert json.loads(saved.read_text(encoding="utf-8"))["roster"] == ["Ann", "Bob"]


def test_invalid_feed_json_exits(tmp_path):
    feed = tmp_path / "broken.json"
    feed.write_text("{not json", encoding="utf-8")

    with pytest.raises(SystemExit):
        main(["scores", "--feed", str(feed)])
