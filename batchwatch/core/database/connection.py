# File: batchwatch/core/database/connection.py

from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from batchwatch.core.config.settings import settings


def build_engine(url: str) -> Engine:
    # check_same_thread=False is needed only for SQLite (Test Mode)
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}

    return create_engine(
        url,
        echo=False,
        pool_pre_ping=True,
        connect_args=connect_args
    )


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@lru_cache(maxsize=1)
def get_session_factory() -> sessionmaker:
    """
    Session factory for the configured workflow repository.
    Built on first use so that importing this module never needs a DB driver.
    """
    return build_session_factory(build_engine(settings.WORKFLOW_REPO_URL))
