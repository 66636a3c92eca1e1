from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

# -------------------------------------------------
# FORM OPTIONS
# -------------------------------------------------
class Language(str, Enum):
    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"
    PYTHON = "python"
    JAVA = "java"
    CSHARP = "csharp"
    PHP = "php"
    CPP = "cpp"
    RUST = "rust"
    GO = "go"


LANGUAGE_LABELS = {
    Language.JAVASCRIPT: "JavaScript",
    Language.TYPESCRIPT: "TypeScript",
    Language.PYTHON: "Python",
    Language.JAVA: "Java",
    Language.CSHARP: "C#",
    Language.PHP: "PHP",
    Language.CPP: "C++",
    Language.RUST: "Rust",
    Language.GO: "Go",
}

EMOJI_PALETTE = (
    "😀", "😊", "😎", "🤓", "🥳", "😴", "🤔", "😅",
    "😤", "🤯", "😢", "🥱", "🔥", "💪", "🚀", "☕",
)

# Column sizes at storage
MAX_NAME_LENGTH = 100
MAX_EMOJI_LENGTH = 32


# -------------------------------------------------
# MOOD ENTRY
# -------------------------------------------------
class MoodEntry(BaseModel):
    """
    One mood on the board, as stored remotely or in the local cache.
    Entries are immutable once created.
    """
    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="Storage id, or a local surrogate id in fallback mode")
    participant: str = Field(..., description="Display name of the student")
    emoji: str = Field(..., description="Selected emoji")
    # Plain string: rows pushed from storage may carry tags outside Language.
    language: str = Field(..., description="Programming language tag")
    comment: Optional[str] = Field(None, description="Optional comment, None when absent")
    created_at: datetime = Field(..., description="Submission time (UTC)")

    def same_triple(self, participant: str, emoji: str, language: str) -> bool:
        return (
            self.participant == participant
            and self.emoji == emoji
            and self.language == language
        )

    def __repr__(self):
        return f"<MoodEntry(id={self.id}, name='{self.participant}', emoji='{self.emoji}')>"


# -------------------------------------------------
# MOOD CANDIDATE (student form input)
# -------------------------------------------------
class MoodCandidate(BaseModel):
    model_config = ConfigDict(frozen=True)

    participant: str = ""
    emoji: str = ""
    language: str = ""
    comment: Optional[str] = None

    @field_validator("participant", "emoji", "language", mode="before")
    @classmethod
    def _strip(cls, value):
        return str(value or "").strip()

    @field_validator("comment", mode="before")
    @classmethod
    def _normalize_comment(cls, value):
        # empty after trim means "no comment"
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    def to_entry(self, id: int, created_at: datetime) -> MoodEntry:
        return MoodEntry(
            id=id,
            participant=self.participant,
            emoji=self.emoji,
            language=self.language,
            comment=self.comment,
            created_at=created_at,
        )
