import csv
import io
from datetime import timedelta

import pytest

from board import BoardSnapshot, REMOTE
from conftest import T0, make_entry
from exports import analytics, emoji_visualization, export_csv, export_filename, export_json, stats
from schema import HUMEUR_SCHEMA, MOOD_SCHEMA


def snapshot_of(entries, minutes_in=12):
    return BoardSnapshot(
        entries=tuple(entries),
        session_started_at=T0,
        mode=REMOTE,
        taken_at=T0 + timedelta(minutes=minutes_in),
    )


@pytest.fixture
def entries():
    return [
        make_entry(id=4, name="Dee", emoji="🚀", language="rust", comment='said "hi", then left'),
        make_entry(id=3, name="Cy", emoji="😀", language="python", comment=None),
        make_entry(id=2, name="Bo", emoji="😀", language="go", comment="line\nbreak"),
        make_entry(id=1, name="Al", emoji="😴", language="python", comment=""),
    ]


def test_csv_has_header_plus_one_row_per_entry(entries):
    rows = list(csv.reader(io.StringIO(export_csv(snapshot_of(entries), MOOD_SCHEMA))))

    assert len(rows) == len(entries) + 1
    assert rows[0] == ["Name", "Emoji", "Language", "Comment", "Date/Time", "Timestamp", "Mode"]
    assert [row[0] for row in rows[1:]] == ["Dee", "Cy", "Bo", "Al"]


def test_csv_fields_survive_quotes_commas_and_newlines(entries):
    rows = list(csv.reader(io.StringIO(export_csv(snapshot_of(entries), MOOD_SCHEMA))))

    assert rows[1][3] == 'said "hi", then left'
    assert rows[3][3] == "line\nbreak"
    assert rows[2][3] == ""
    assert rows[1][5] == T0.isoformat()
    assert rows[1][6] == "remote"
    assert rows[1][4] == "12min"


def test_csv_quotes_every_field(entries):
    first_line = export_csv(snapshot_of(entries[1:2]), MOOD_SCHEMA).splitlines()[1]
    assert first_line.startswith('"Cy","😀","python",""')


def test_csv_headers_follow_schema():
    content = export_csv(snapshot_of([]), HUMEUR_SCHEMA)
    assert content.splitlines() == ['"Prénom","Emoji","Langage","Commentaire","Date/Heure","Timestamp","Mode"']


def test_json_export_metadata_and_moods(entries):
    data = export_json(snapshot_of(entries), MOOD_SCHEMA)

    assert data["metadata"] == {
        "exportDate": (T0 + timedelta(minutes=12)).isoformat(),
        "mode": "remote",
        "sessionDuration": 12,
        "totalParticipants": 4,
        "uniqueEmojis": 3,
        "version": "secure-2.0",
    }
    assert [m["name"] for m in data["moods"]] == ["Dee", "Cy", "Bo", "Al"]
    assert data["moods"][1]["comment"] is None


def test_json_moods_key_follows_schema(entries):
    data = export_json(snapshot_of(entries), HUMEUR_SCHEMA)
    assert "humeurs" in data
    assert data["humeurs"][0]["prenom"] == "Dee"


def test_analytics_counts_and_top_emojis(entries):
    result = analytics(snapshot_of(entries))

    assert result["emojiDistribution"] == {"🚀": 1, "😀": 2, "😴": 1}
    assert result["languagePreferences"] == {"rust": 1, "python": 2, "go": 1}
    assert result["topEmojis"] == [
        {"emoji": "😀", "count": 2, "percentage": 50},
        {"emoji": "🚀", "count": 1, "percentage": 25},
        {"emoji": "😴", "count": 1, "percentage": 25},
    ]


def test_top_emojis_keeps_five_and_rounds_half_up():
    emojis = ["😀"] * 4 + ["🚀"] * 2 + ["😴", "🔥", "☕", "🤓"] + ["😎"] * 2 + ["🥳"] * 8
    many = [make_entry(id=i, emoji=e) for i, e in enumerate(emojis)]
    # 20 entries: 8 -> 40%, 4 -> 20%, 2 -> 10%, 1 -> 5%
    top = analytics(snapshot_of(many))["topEmojis"]

    assert len(top) == 5
    assert [t["emoji"] for t in top] == ["🥳", "😀", "🚀", "😎", "😴"]
    for item in top:
        assert item["percentage"] == int(item["count"] / len(many) * 100 + 0.5)
    assert sum(item["percentage"] for item in top) <= 100


def test_half_percentages_round_up():
    eight = [make_entry(id=i, emoji="😀" if i < 1 else "🚀") for i in range(8)]
    top = analytics(snapshot_of(eight))["topEmojis"]
    # 1/8 = 12.5% -> 13, 7/8 = 87.5% -> 88
    assert {t["emoji"]: t["percentage"] for t in top} == {"🚀": 88, "😀": 13}


def test_stats_and_visualization(entries):
    snapshot = snapshot_of(entries)

    assert stats(snapshot) == {"totalParticipants": 4, "uniqueEmojis": 3, "sessionMinutes": 12}
    assert emoji_visualization(snapshot) == [
        {"emoji": "😀", "count": 2},
        {"emoji": "🚀", "count": 1},
        {"emoji": "😴", "count": 1},
    ]


def test_visualization_is_capped_at_ten():
    palette = "😀😊😎🤓🥳😴🤔😅😤🤯😢🥱"
    many = [make_entry(id=i, emoji=e) for i, e in enumerate(palette)]
    assert len(emoji_visualization(snapshot_of(many))) == 10


def test_export_filenames(entries):
    snapshot = snapshot_of(entries)
    assert export_filename(snapshot, "csv") == "emoji-code-mood-2026-03-02.csv"
    assert export_filename(snapshot, "json") == "emoji-code-mood-session-2026-03-02.json"
