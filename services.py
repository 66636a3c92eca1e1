import logging
from dataclasses import dataclass
from typing import Optional

from flask import current_app
from sqlalchemy.engine import Engine

from board import SynchronizedList
from config import Settings
from db import init_engine
from exceptions import NetworkError, RemoteStoreError
from guard import SubmissionGuard
from local_cache import LocalCache
from store import MoodStore
from utils import hash_password

logger = logging.getLogger(__name__)

EXTENSION_KEY = "mood_board"


@dataclass
class BoardServices:
    """Everything one running board needs, owned by the Flask app."""
    settings: Settings
    store: MoodStore
    board: SynchronizedList
    guard: SubmissionGuard
    operator_password_hash: Optional[str] = None


def build_services(settings: Settings, engine: Optional[Engine] = None) -> BoardServices:
    engine = engine or init_engine(settings.database_url)
    store = MoodStore(engine, settings.schema)
    try:
        store.ensure_schema()
    except (NetworkError, RemoteStoreError) as e:
        # board.start() notices the same problem and goes local
        logger.error("[DB] Error creating tables: %s", e)

    board = SynchronizedList(
        store,
        LocalCache(settings.local_cache_dir, settings.schema),
        retrieval_cap=settings.retrieval_cap,
    )
    store.subscribe(board.handle_change)

    guard = SubmissionGuard(
        board,
        settings.schema,
        duplicate_window_seconds=settings.duplicate_window_seconds,
        remote_timeout=settings.remote_timeout,
    )

    password_hash = hash_password(settings.operator_password) if settings.auth_enabled else None
    return BoardServices(settings, store, board, guard, password_hash)


def get_services() -> BoardServices:
    return current_app.extensions[EXTENSION_KEY]
