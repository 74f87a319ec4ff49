from contextlib import contextmanager
from functools import lru_cache
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from storefront.core.config import config

Base = declarative_base()


def build_engine(url: str, echo: bool = False) -> Engine:
    """Create an engine; in-memory SQLite shares one connection across threads"""
    if url.startswith("sqlite") and (":memory:" in url or url == "sqlite://"):
        return create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(url, echo=echo, pool_pre_ping=True)


@lru_cache()
def get_engine() -> Engine:
    return build_engine(config.database.url, config.database.echo)


@contextmanager
def get_connection(engine: Optional[Engine] = None):
    with (engine or get_engine()).connect() as conn:
        yield conn


def init_db(engine: Optional[Engine] = None) -> None:
    """Create tables that don't exist yet"""
    from storefront.models import records  # noqa: F401 (registers tables on Base)

    Base.metadata.create_all(engine or get_engine())
