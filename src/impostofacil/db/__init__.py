"""Relational storage for knowledge-base chunks."""

from impostofacil.db.models import Base, ContentChunkRow
from impostofacil.db.session import create_db_engine, create_session_factory, init_db, session_scope

__all__ = [
    "Base",
    "ContentChunkRow",
    "create_db_engine",
    "create_session_factory",
    "init_db",
    "session_scope",
]
