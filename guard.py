import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional, Set

from board import LOCAL, SynchronizedList
from exceptions import (
    DuplicateMoodError,
    MoodValidationError,
    NetworkError,
    RemoteStoreError,
    RemoteTimeoutError,
    SubmissionInProgressError,
)
from models import MAX_EMOJI_LENGTH, MAX_NAME_LENGTH, Language, MoodCandidate, MoodEntry
from schema import FieldSchema
from utils import utcnow

logger = logging.getLogger(__name__)

MIN_NAME_LENGTH = 2
KNOWN_LANGUAGES = {language.value for language in Language}


class SubmissionStatus(str, Enum):
    ACCEPTED = "accepted"
    ACCEPTED_LOCAL = "accepted_local"
    INVALID = "invalid"
    DUPLICATE = "duplicate"
    BUSY = "busy"
    FAILED = "failed"


@dataclass(frozen=True)
class SubmissionOutcome:
    status: SubmissionStatus
    message: str
    entry: Optional[MoodEntry] = None

    @property
    def ok(self) -> bool:
        return self.status in (SubmissionStatus.ACCEPTED, SubmissionStatus.ACCEPTED_LOCAL)


class SubmissionGuard:
    """
    Decides whether a student's mood goes to storage.

    Refuses invalid input, recent near-duplicates, and a second submit from a
    client whose first one has not finished. Storage that cannot be reached
    falls back to the board's local list; any other storage failure is
    reported back as FAILED.
    """

    def __init__(
        self,
        board: SynchronizedList,
        schema: FieldSchema,
        duplicate_window_seconds: float = 30.0,
        remote_timeout: float = 10.0,
        clock=utcnow,
        executor: Optional[ThreadPoolExecutor] = None,
    ):
        self.board = board
        self.schema = schema
        self.duplicate_window = timedelta(seconds=duplicate_window_seconds)
        self.remote_timeout = remote_timeout
        self._clock = clock
        self._executor = executor or ThreadPoolExecutor(max_workers=4, thread_name_prefix="mood-insert")
        self._in_flight: Set[str] = set()
        self._in_flight_lock = threading.Lock()

    def close(self) -> None:
        self._executor.shutdown(wait=False)

    # -------------------------------------------------
    # CHECKS
    # -------------------------------------------------
    def validate(self, candidate: MoodCandidate) -> None:
        def check_emoji():
            if not candidate.emoji:
                raise MoodValidationError("Don't forget to pick an emoji!")
            if len(candidate.emoji) > MAX_EMOJI_LENGTH:
                raise MoodValidationError(f"Emoji must be at most {MAX_EMOJI_LENGTH} characters")

        def check_name():
            if len(candidate.participant) < MIN_NAME_LENGTH:
                raise MoodValidationError(f"Name must be at least {MIN_NAME_LENGTH} characters")
            if len(candidate.participant) > MAX_NAME_LENGTH:
                raise MoodValidationError(f"Name must be at most {MAX_NAME_LENGTH} characters")

        checks = (check_emoji, check_name) if self.schema.emoji_checked_first else (check_name, check_emoji)
        for check in checks:
            check()

        if candidate.language not in KNOWN_LANGUAGES:
            raise MoodValidationError(f"Unknown language '{candidate.language}'")

    def check_recent(self, candidate: MoodCandidate, now: datetime) -> None:
        for entry in self.board.recent_entries():
            if (
                entry.same_triple(candidate.participant, candidate.emoji, candidate.language)
                and now - entry.created_at < self.duplicate_window
            ):
                raise DuplicateMoodError("similar mood submitted recently")

    # -------------------------------------------------
    # SUBMIT
    # -------------------------------------------------
    def submit(self, candidate: MoodCandidate, client_id: str = "anonymous") -> SubmissionOutcome:
        try:
            self._claim(client_id)
        except SubmissionInProgressError as e:
            logger.warning("%s", e)
            return SubmissionOutcome(SubmissionStatus.BUSY, "Submission already in progress")

        try:
            return self._submit(candidate)
        finally:
            self._release(client_id)

    def _claim(self, client_id: str) -> None:
        with self._in_flight_lock:
            if client_id in self._in_flight:
                raise SubmissionInProgressError(client_id)
            self._in_flight.add(client_id)

    def _release(self, client_id: str) -> None:
        with self._in_flight_lock:
            self._in_flight.discard(client_id)

    def _submit(self, candidate: MoodCandidate) -> SubmissionOutcome:
        now = self._clock()
        try:
            self.validate(candidate)
            self.check_recent(candidate, now)
        except MoodValidationError as e:
            return SubmissionOutcome(SubmissionStatus.INVALID, str(e))
        except DuplicateMoodError as e:
            logger.warning("Refused duplicate from %s: %s", candidate.participant, e)
            return SubmissionOutcome(SubmissionStatus.DUPLICATE, "You already sent this mood, hang on a few seconds")

        if self.board.mode == LOCAL:
            return self._accept_locally(candidate, now)

        try:
            stored = self._insert_remote(candidate.to_entry(id=0, created_at=now))
        except NetworkError:
            logger.info("Storage unreachable, keeping mood from %s locally", candidate.participant)
            return self._accept_locally(candidate, now)
        except RemoteStoreError as e:
            logger.error("Could not store mood from %s: %s", candidate.participant, e)
            return SubmissionOutcome(SubmissionStatus.FAILED, "Could not save your mood, please retry")

        logger.info("Mood %s stored for %s", stored.id, stored.participant)
        return SubmissionOutcome(SubmissionStatus.ACCEPTED, "Mood sent", stored)

    def _insert_remote(self, entry: MoodEntry) -> MoodEntry:
        future = self._executor.submit(self.board.store.insert, entry)
        try:
            return future.result(timeout=self.remote_timeout)
        except FutureTimeout:
            raise RemoteTimeoutError(self.remote_timeout) from None

    def _accept_locally(self, candidate: MoodCandidate, now: datetime) -> SubmissionOutcome:
        try:
            entry = self.board.append_local(candidate, now)
        except DuplicateMoodError as e:
            logger.warning("Refused local duplicate from %s: %s", candidate.participant, e)
            return SubmissionOutcome(SubmissionStatus.DUPLICATE, "This exact mood is already on the board")
        return SubmissionOutcome(SubmissionStatus.ACCEPTED_LOCAL, "Mood saved locally", entry)
