"""
Database engine + session factory.

configure_database() is called once from create_app() with the URL from
Settings — SQLite for local dev, Postgres in production.
get_session() always returns a real session.
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase


class Base(DeclarativeBase):
    pass


engine = None
SessionLocal = sessionmaker()


def configure_database(url):
    """Create the engine for `url` and bind the session factory to it."""
    global engine

    # SQLite needs different engine kwargs than Postgres
    if url.startswith('sqlite'):
        engine = create_engine(url, connect_args={'check_same_thread': False})
    else:
        engine = create_engine(url, pool_pre_ping=True, pool_size=5, max_overflow=10)

    SessionLocal.configure(bind=engine)
    return engine


def get_session():
    """Return a new DB session."""
    return SessionLocal()
