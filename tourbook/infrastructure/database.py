from contextlib import contextmanager
from typing import Iterator, Optional
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..core import get_settings
from ..models import Base


def make_engine(dsn: Optional[str] = None, echo: Optional[bool] = None) -> Engine:
    """Create the cart database engine and make sure its tables exist"""
    settings = get_settings()
    dsn = dsn or settings.CART_DB_DSN
    kwargs = {"echo": settings.CART_DB_ECHO if echo is None else echo, "pool_pre_ping": True}
    if dsn.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if dsn in ("sqlite://", "sqlite:///:memory:"):
            # One shared connection, otherwise every thread sees an empty database
            kwargs["poolclass"] = StaticPool
    engine = create_engine(dsn, **kwargs)
    Base.metadata.create_all(engine)
    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        engine,
        class_=Session,
        expire_on_commit=False,
        autoflush=False,
    )


@contextmanager
def session_scope(factory: sessionmaker) -> Iterator[Session]:
    """Session that commits on success and rolls back on error"""
    with factory() as session:
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
