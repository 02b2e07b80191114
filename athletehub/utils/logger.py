import logging
from datetime import datetime, timezone

from athletehub import db
from athletehub.settings import LOG_LEVEL

logger = logging.getLogger(__name__)


def configure_logging(level: str = LOG_LEVEL) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def log_activity(user_id: str, action: str, metadata: dict | None = None):
    """Append a business event to activity_logs. Best-effort."""
    try:
        db.activity_logs().insert_one({
            "user_id": user_id,
            "action": action,
            "timestamp": datetime.now(timezone.utc),
            "metadata": metadata or {},
        })
    except Exception:
        logger.exception("activity log write failed (%s)", action)
