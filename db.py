import logging
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


# -------------------------------------------------
# SQLALCHEMY ENGINE
# -------------------------------------------------
def init_engine(database_url: str) -> Engine:
    url = make_url(database_url)
    kwargs = {"pool_pre_ping": True}

    if url.get_backend_name() == "sqlite":
        # Flask serves requests on threads
        kwargs["connect_args"] = {"check_same_thread": False}
        if url.database in (None, "", ":memory:"):
            # one shared connection, otherwise each thread sees its own empty db
            kwargs["poolclass"] = StaticPool

    engine = create_engine(url, **kwargs)

    # hides password safely
    logger.info("[DB] Engine ready for %s", url.render_as_string(hide_password=True))
    return engine
