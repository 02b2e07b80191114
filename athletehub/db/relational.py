import logging

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError

from athletehub.settings import DATABASE_URL

logger = logging.getLogger(__name__)

_engine = None


def get_engine():
    """Engine for the relational store, or None when DATABASE_URL is unset."""
    global _engine
    if not DATABASE_URL:
        return None
    if _engine is None:
        _engine = create_engine(DATABASE_URL, pool_pre_ping=True)
    return _engine


def status() -> str:
    engine = get_engine()
    if engine is None:
        return "not_configured"
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return "connected"
    except SQLAlchemyError as e:
        logger.warning("relational store unreachable: %s", e)
        return "disconnected"
