"""Database connections package."""

from techfeed.db.postgres import async_session, engine, get_session, init_db, insert_ignore

__all__ = ["get_session", "init_db", "engine", "async_session", "insert_ignore"]
