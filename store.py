import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, List, Optional

from sqlalchemy import Column, DateTime, Integer, MetaData, String, Table, Text, delete, insert, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DisconnectionError, InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from exceptions import NetworkError, RemoteStoreError
from models import MAX_EMOJI_LENGTH, MAX_NAME_LENGTH, MoodEntry
from schema import FieldSchema

logger = logging.getLogger(__name__)

INSERT = "INSERT"
DELETE = "DELETE"

# Errors meaning "could not talk to the database at all"
NETWORK_ERRORS = (OperationalError, InterfaceError, DisconnectionError, PoolTimeoutError)


def build_moods_table(schema: FieldSchema, metadata: MetaData) -> Table:
    """SQLAlchemy core Table for the board, named after the schema variant."""
    return Table(
        schema.table, metadata,
        Column(schema.id, Integer, primary_key=True, autoincrement=True),
        Column(schema.participant, String(MAX_NAME_LENGTH), nullable=False),
        Column(schema.emoji, String(MAX_EMOJI_LENGTH), nullable=False),
        Column(schema.language, String(32), nullable=False),
        Column(schema.comment, Text, nullable=True),
        Column(schema.created_at, DateTime(timezone=True), nullable=False, index=True),
    )


@dataclass(frozen=True)
class ChangeEvent:
    """One notification of the change feed. DELETE events carry no entry."""
    kind: str
    entry: Optional[MoodEntry] = None


Listener = Callable[[ChangeEvent], None]


class MoodStore:
    """
    Remote storage for mood entries: row create, newest-first bulk read,
    delete-all, and a change feed announcing committed inserts and deletes.
    """

    def __init__(self, engine: Engine, schema: FieldSchema):
        self.engine = engine
        self.schema = schema
        self.metadata = MetaData()
        self.table = build_moods_table(schema, self.metadata)
        self._listeners: List[Listener] = []
        self._listeners_lock = threading.Lock()

    @contextmanager
    def _translate_errors(self, action: str):
        try:
            yield
        except NETWORK_ERRORS as e:
            logger.error("[DB] %s failed, storage unreachable: %s", action, e)
            raise NetworkError(f"{action} failed: storage unreachable") from e
        except SQLAlchemyError as e:
            logger.error("[DB] %s failed: %s", action, e)
            raise RemoteStoreError(f"{action} failed: {e.__class__.__name__}") from e

    # -------------------------------------------------
    # SCHEMA / HEALTH
    # -------------------------------------------------
    def ensure_schema(self) -> None:
        with self._translate_errors("create table"):
            self.metadata.create_all(bind=self.engine)
        logger.info("[DB] Table ensured: %s", self.table.name)

    def ping(self) -> None:
        """Raise NetworkError / RemoteStoreError unless the table can be read."""
        with self._translate_errors("connection check"):
            with self.engine.connect() as conn:
                conn.execute(select(self.table.c[self.schema.id]).limit(1)).all()

    # -------------------------------------------------
    # ROW OPERATIONS
    # -------------------------------------------------
    def insert(self, entry: MoodEntry) -> MoodEntry:
        """Store an entry and return it with the id assigned by the database."""
        s = self.schema
        values = {
            s.participant: entry.participant,
            s.emoji: entry.emoji,
            s.language: entry.language,
            s.comment: entry.comment,
            s.created_at: entry.created_at,
        }
        with self._translate_errors("insert"):
            with self.engine.begin() as conn:
                result = conn.execute(insert(self.table).values(values))
                new_id = result.inserted_primary_key[0]

        stored = entry.model_copy(update={"id": new_id})
        self._emit(ChangeEvent(INSERT, stored))
        return stored

    def fetch_recent(self, limit: int) -> List[MoodEntry]:
        """Newest-first, at most `limit` entries."""
        created_at = self.table.c[self.schema.created_at]
        row_id = self.table.c[self.schema.id]
        stmt = select(self.table).order_by(created_at.desc(), row_id.desc()).limit(limit)

        with self._translate_errors("load"):
            with self.engine.connect() as conn:
                rows = conn.execute(stmt).mappings().all()
        return [self.schema.from_row(row) for row in rows]

    def delete_all(self) -> int:
        with self._translate_errors("delete all"):
            with self.engine.begin() as conn:
                deleted = conn.execute(delete(self.table)).rowcount
        logger.info("[DB] Deleted %s rows from %s", deleted, self.table.name)
        self._emit(ChangeEvent(DELETE))
        return deleted

    # -------------------------------------------------
    # CHANGE FEED
    # -------------------------------------------------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        with self._listeners_lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._listeners_lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: ChangeEvent) -> None:
        with self._listeners_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.exception("Change feed listener failed on %s event", event.kind)
