"""
Field-name tables for the two naming variants of the board.

The board stores, caches and exports the same entity under either the
"mood" or the "humeur" vocabulary. Everything that touches a field name
outside of Python goes through a FieldSchema, so the variants differ only
in data.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Tuple

from exceptions import ConfigurationError
from models import MoodEntry


@dataclass(frozen=True)
class FieldSchema:
    variant: str
    table: str
    id: str
    participant: str
    emoji: str
    language: str
    comment: str
    created_at: str
    # participant, emoji, language, comment, formatted time, raw timestamp, mode
    csv_headers: Tuple[str, str, str, str, str, str, str]
    cache_namespace: str
    snippet_variable: str
    just_now_label: str
    emoji_checked_first: bool

    def to_row(self, entry: MoodEntry) -> Dict[str, Any]:
        """Turn a MoodEntry into a plain row keyed by this schema's field names."""
        return {
            self.id: entry.id,
            self.participant: entry.participant,
            self.emoji: entry.emoji,
            self.language: entry.language,
            self.comment: entry.comment,
            self.created_at: entry.created_at.isoformat(),
        }

    def from_row(self, row: Mapping[str, Any]) -> MoodEntry:
        """Build a MoodEntry from a storage, cache or feed row."""
        created_at = row[self.created_at]
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at.replace("Z", "+00:00"))
        if created_at.tzinfo is None:
            # sqlite hands back naive datetimes
            created_at = created_at.replace(tzinfo=timezone.utc)

        return MoodEntry(
            id=row[self.id],
            participant=row[self.participant],
            emoji=row[self.emoji],
            language=row[self.language],
            comment=row.get(self.comment),
            created_at=created_at,
        )


MOOD_SCHEMA = FieldSchema(
    variant="mood",
    table="moods",
    id="id",
    participant="name",
    emoji="emoji",
    language="language",
    comment="comment",
    created_at="created_at",
    csv_headers=("Name", "Emoji", "Language", "Comment", "Date/Time", "Timestamp", "Mode"),
    cache_namespace="emojiMoodLocal",
    snippet_variable="mood",
    just_now_label="just now",
    emoji_checked_first=True,
)

HUMEUR_SCHEMA = FieldSchema(
    variant="humeur",
    table="humeurs",
    id="id",
    participant="prenom",
    emoji="emoji",
    language="langage",
    comment="commentaire",
    created_at="created_at",
    csv_headers=("Prénom", "Emoji", "Langage", "Commentaire", "Date/Heure", "Timestamp", "Mode"),
    cache_namespace="emojiHumeurLocal",
    snippet_variable="humeur",
    just_now_label="À l'instant",
    emoji_checked_first=False,
)

SCHEMAS = {s.variant: s for s in (MOOD_SCHEMA, HUMEUR_SCHEMA)}


def get_schema(variant: str) -> FieldSchema:
    try:
        return SCHEMAS[variant.strip().lower()]
    except KeyError:
        raise ConfigurationError(
            f"Unknown MOOD_SCHEMA '{variant}'. Expected one of: {', '.join(SCHEMAS)}"
        ) from None
