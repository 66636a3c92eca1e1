import json
import logging
import os
import tempfile
from typing import List

from models import MoodEntry
from schema import FieldSchema

logger = logging.getLogger(__name__)


class LocalCache:
    """
    Durable fallback store: the whole board list as one JSON file,
    named after the schema's cache namespace.
    """

    def __init__(self, directory: str, schema: FieldSchema):
        self.directory = directory
        self.schema = schema
        self.path = os.path.join(directory, f"{schema.cache_namespace}.json")

    def load(self) -> List[MoodEntry]:
        """Entries saved by the last save(), or [] when missing or unreadable."""
        if not os.path.exists(self.path):
            return []
        try:
            with open(self.path, encoding="utf-8") as fh:
                rows = json.load(fh)
            return [self.schema.from_row(row) for row in rows]
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.error("Could not read local cache %s: %s", self.path, e)
            return []

    def save(self, entries: List[MoodEntry]) -> None:
        os.makedirs(self.directory, exist_ok=True)
        rows = [self.schema.to_row(entry) for entry in entries]

        fd, tmp_path = tempfile.mkstemp(dir=self.directory, prefix=".tmp-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(rows, fh, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
