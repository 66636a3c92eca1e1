"""
The live board: one ordered, newest-first list of mood entries kept in step
with the storage change feed, with a local JSON cache as fallback store.

Only SynchronizedList mutates the list and the cache. Everything else
(rendering, stats, export, the submission guard) reads a BoardSnapshot.
"""
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple

from exceptions import DeleteError, DuplicateMoodError, LoadError, NetworkError, RemoteStoreError
from local_cache import LocalCache
from models import MoodCandidate, MoodEntry
from store import DELETE, INSERT, ChangeEvent, MoodStore
from utils import SurrogateIds, utcnow

logger = logging.getLogger(__name__)

REMOTE = "remote"
LOCAL = "local"


@dataclass
class BoardState:
    entries: List[MoodEntry] = field(default_factory=list)
    session_started_at: datetime = field(default_factory=utcnow)
    mode: str = REMOTE


@dataclass(frozen=True)
class BoardSnapshot:
    entries: Tuple[MoodEntry, ...]
    session_started_at: datetime
    mode: str
    taken_at: datetime

    def __len__(self):
        return len(self.entries)


class SynchronizedList:
    """
    Owner of the board state.

    Storage calls are made outside the lock. A bulk load in flight does not
    lose pushes: inserts arriving meanwhile are queued and prepended once the
    load lands, and a delete arriving meanwhile schedules one more load.
    """

    def __init__(
        self,
        store: MoodStore,
        cache: LocalCache,
        retrieval_cap: int = 100,
        state: Optional[BoardState] = None,
        clock=utcnow,
        ids: Optional[SurrogateIds] = None,
    ):
        self.store = store
        self.cache = cache
        self.retrieval_cap = retrieval_cap
        self._state = state or BoardState()
        self._clock = clock
        self._ids = ids or SurrogateIds()
        self._lock = threading.RLock()
        self._loading = False
        self._pending: List[MoodEntry] = []
        self._reload_requested = False

    @property
    def mode(self) -> str:
        with self._lock:
            return self._state.mode

    def snapshot(self) -> BoardSnapshot:
        with self._lock:
            return BoardSnapshot(
                entries=tuple(self._state.entries),
                session_started_at=self._state.session_started_at,
                mode=self._state.mode,
                taken_at=self._clock(),
            )

    def recent_entries(self) -> Tuple[MoodEntry, ...]:
        """Entries the board holds or will hold once a load in flight lands, newest first."""
        with self._lock:
            return tuple(reversed(self._pending)) + tuple(self._state.entries)

    # -------------------------------------------------
    # STARTUP
    # -------------------------------------------------
    def start(self) -> str:
        """Connect to storage and load the board; fall back to the local cache."""
        try:
            self.store.ping()
        except (NetworkError, RemoteStoreError) as e:
            logger.warning("Storage unavailable (%s), switching to local mode", e)
            cached = self.cache.load()
            with self._lock:
                self._state.mode = LOCAL
                self._state.entries = cached
            logger.info("%s mood codes loaded from local cache", len(cached))
            return LOCAL

        with self._lock:
            self._state.mode = REMOTE
        self.bulk_load()
        return REMOTE

    # -------------------------------------------------
    # BULK LOAD
    # -------------------------------------------------
    def _fetch(self) -> List[MoodEntry]:
        try:
            return self.store.fetch_recent(self.retrieval_cap)
        except (NetworkError, RemoteStoreError) as e:
            raise LoadError(str(e)) from e

    def bulk_load(self) -> bool:
        """
        Replace the list with the newest entries from storage.

        Returns False when the load failed; the previous list is then kept.
        In local mode the list is reloaded from the cache instead.
        """
        with self._lock:
            if self._state.mode == LOCAL:
                self._state.entries = self.cache.load()
                return True
            if self._loading:
                self._reload_requested = True
                return True
            self._loading = True
            self._pending = []

        while True:
            try:
                loaded = self._fetch()
            except LoadError as e:
                logger.error("Board load failed, keeping current entries: %s", e)
                loaded = None

            with self._lock:
                pending = list(reversed(self._pending))
                self._pending = []
                if loaded is None:
                    self._state.entries = pending + self._state.entries
                else:
                    loaded_ids = {entry.id for entry in loaded}
                    pending = [entry for entry in pending if entry.id not in loaded_ids]
                    self._state.entries = pending + loaded
                    logger.info("%s mood codes loaded from storage", len(self._state.entries))

                if loaded is not None and self._reload_requested:
                    self._reload_requested = False
                    continue

                self._reload_requested = False
                self._loading = False
                return loaded is not None

    # -------------------------------------------------
    # CHANGE FEED
    # -------------------------------------------------
    def handle_change(self, event: ChangeEvent) -> None:
        logger.debug("Realtime change: %s", event.kind)
        if event.kind == INSERT and event.entry is not None:
            self.push_insert(event.entry)
        elif event.kind == DELETE:
            self.push_delete()

    def push_insert(self, entry: MoodEntry) -> None:
        """Prepend a freshly stored entry, trusting the feed (no duplicate check)."""
        with self._lock:
            if self._loading:
                self._pending.append(entry)
                return
            self._state.entries.insert(0, entry)

    def push_delete(self) -> None:
        """Deletions are never applied piecemeal: reload everything."""
        with self._lock:
            if self._loading:
                self._reload_requested = True
                return
        self.bulk_load()

    # -------------------------------------------------
    # LOCAL FALLBACK
    # -------------------------------------------------
    def append_local(self, candidate: MoodCandidate, created_at: datetime) -> MoodEntry:
        """
        Accept an entry without storage: exact duplicate check, surrogate id,
        prepend, then save the whole list to the local cache.

        During a load the entry is queued with the pushes so the load
        result does not overwrite it.
        """
        with self._lock:
            for existing in self.recent_entries():
                if (
                    existing.same_triple(candidate.participant, candidate.emoji, candidate.language)
                    and existing.comment == candidate.comment
                ):
                    raise DuplicateMoodError("identical mood already stored locally")

            entry = candidate.to_entry(id=self._ids.next(), created_at=created_at)
            if self._loading:
                self._pending.append(entry)
            else:
                self._state.entries.insert(0, entry)
            try:
                self.cache.save(list(self.recent_entries()))
            except OSError as e:
                logger.error("Could not write local cache %s: %s", self.cache.path, e)

        logger.info("Mood added locally with id %s", entry.id)
        return entry

    # -------------------------------------------------
    # OPERATOR
    # -------------------------------------------------
    def _delete_remote(self) -> None:
        try:
            self.store.delete_all()
        except (NetworkError, RemoteStoreError) as e:
            raise DeleteError(str(e)) from e

    def clear_all(self) -> bool:
        """Delete every row at storage. The DELETE event then reloads the view."""
        try:
            self._delete_remote()
        except DeleteError as e:
            logger.error("Clearing the board failed: %s", e)
            return False
        return True
