"""
Read-only projections of a board snapshot: stats, the emoji bubbles, and
the CSV / JSON session exports.
"""
import csv
import io
from collections import Counter
from typing import Any, Dict, List

from board import BoardSnapshot
from schema import FieldSchema
from snippets import format_relative_time
from utils import minutes_between, round_half_up

EXPORT_VERSION = "secure-2.0"
VISUALIZATION_LIMIT = 10
TOP_EMOJIS_LIMIT = 5


def _ranked(counts: Counter, limit: int) -> List[tuple]:
    # stable: ties keep first-seen order
    return sorted(counts.items(), key=lambda kv: kv[1], reverse=True)[:limit]


def stats(snapshot: BoardSnapshot) -> Dict[str, int]:
    return {
        "totalParticipants": len(snapshot.entries),
        "uniqueEmojis": len({entry.emoji for entry in snapshot.entries}),
        "sessionMinutes": minutes_between(snapshot.session_started_at, snapshot.taken_at),
    }


def emoji_visualization(snapshot: BoardSnapshot, limit: int = VISUALIZATION_LIMIT) -> List[Dict[str, Any]]:
    counts = Counter(entry.emoji for entry in snapshot.entries)
    return [{"emoji": emoji, "count": count} for emoji, count in _ranked(counts, limit)]


def analytics(snapshot: BoardSnapshot) -> Dict[str, Any]:
    emoji_counts = Counter(entry.emoji for entry in snapshot.entries)
    language_counts = Counter(entry.language for entry in snapshot.entries)
    total = len(snapshot.entries)

    return {
        "emojiDistribution": dict(emoji_counts),
        "languagePreferences": dict(language_counts),
        "topEmojis": [
            {"emoji": emoji, "count": count, "percentage": round_half_up(count / total * 100)}
            for emoji, count in _ranked(emoji_counts, TOP_EMOJIS_LIMIT)
        ],
    }


# -------------------------------------------------
# CSV
# -------------------------------------------------
def export_csv(snapshot: BoardSnapshot, schema: FieldSchema) -> str:
    """Header plus one row per entry, list order, every field quoted."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(schema.csv_headers)
    for entry in snapshot.entries:
        writer.writerow([
            entry.participant,
            entry.emoji,
            entry.language,
            entry.comment or "",
            format_relative_time(entry.created_at, snapshot.taken_at, schema.just_now_label),
            entry.created_at.isoformat(),
            snapshot.mode,
        ])
    return buffer.getvalue()


# -------------------------------------------------
# JSON
# -------------------------------------------------
def export_json(snapshot: BoardSnapshot, schema: FieldSchema) -> Dict[str, Any]:
    return {
        "metadata": {
            "exportDate": snapshot.taken_at.isoformat(),
            "mode": snapshot.mode,
            "sessionDuration": minutes_between(snapshot.session_started_at, snapshot.taken_at),
            "totalParticipants": len(snapshot.entries),
            "uniqueEmojis": len({entry.emoji for entry in snapshot.entries}),
            "version": EXPORT_VERSION,
        },
        schema.table: [schema.to_row(entry) for entry in snapshot.entries],
        "analytics": analytics(snapshot),
    }


def export_filename(snapshot: BoardSnapshot, extension: str) -> str:
    day = snapshot.taken_at.date().isoformat()
    if extension == "json":
        return f"emoji-code-mood-session-{day}.json"
    return f"emoji-code-mood-{day}.{extension}"
