from datetime import datetime
from typing import Any, Dict

from markupsafe import escape

from models import Language, MoodEntry
from schema import FieldSchema

# declaration, comment marker, separator before the comment
SNIPPET_TEMPLATES = {
    Language.JAVASCRIPT: ('let {var} = "{emoji}";', "//", " "),
    Language.TYPESCRIPT: ('const {var}: string = "{emoji}";', "//", " "),
    Language.PYTHON: ('{var} = "{emoji}"', "#", "  "),
    Language.JAVA: ('String {var} = "{emoji}";', "//", " "),
    Language.CSHARP: ('string {var} = "{emoji}";', "//", " "),
    Language.PHP: ('${var} = "{emoji}";', "//", " "),
    Language.CPP: ('std::string {var} = "{emoji}";', "//", " "),
    Language.RUST: ('let {var} = "{emoji}";', "//", " "),
    Language.GO: ('{var} := "{emoji}"', "//", " "),
}

GENERIC_TEMPLATE = '{var} = "{emoji}";'


def code_snippet(entry: MoodEntry, variable: str = "mood") -> str:
    """HTML code line for a mood card, in the entry's language."""
    emoji = escape(entry.emoji)
    try:
        declaration, marker, sep = SNIPPET_TEMPLATES[Language(entry.language)]
    except ValueError:
        # unknown tag: plain generic line, comment without markup
        line = GENERIC_TEMPLATE.format(var=variable, emoji=emoji)
        if entry.comment:
            line += f" // {escape(entry.comment)}"
        return line

    line = declaration.format(var=variable, emoji=emoji)
    if entry.comment:
        line += f'{sep}<span class="comment">{marker} {escape(entry.comment)}</span>'
    return line


def format_relative_time(created_at: datetime, now: datetime, just_now_label: str = "just now") -> str:
    minutes = int((now - created_at).total_seconds() // 60)

    if minutes < 1:
        return just_now_label
    if minutes < 60:
        return f"{minutes}min"
    if minutes < 1440:
        hours, rest = divmod(minutes, 60)
        return f"{hours}h{rest}min" if rest else f"{hours}h"
    return created_at.astimezone().strftime("%x %X")


def render_card(entry: MoodEntry, now: datetime, schema: FieldSchema) -> Dict[str, Any]:
    card = schema.to_row(entry)
    card["time"] = format_relative_time(entry.created_at, now, schema.just_now_label)
    card["snippet"] = code_snippet(entry, schema.snippet_variable)
    return card
