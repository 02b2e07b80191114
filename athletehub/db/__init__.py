from pymongo import MongoClient
from pymongo.database import Database
from pymongo.collection import Collection

from athletehub.settings import MONGO_URI, MONGO_DB

_client = None


def get_client():
    global _client
    if _client is None:
        # MongoClient connects lazily, first query opens the pool
        _client = MongoClient(MONGO_URI, serverSelectionTimeoutMS=5000)
    return _client


def use_client(client) -> None:
    """Swap the process-wide client (tests hand in a mongomock client)."""
    global _client
    _client = client


def get_db() -> Database:
    return get_client()[MONGO_DB]


def ping() -> bool:
    try:
        get_client().admin.command("ping")
        return True
    except Exception:
        return False


# --- Collections (one source of truth) ---
def users() -> Collection:
    return get_db()["users"]


def athletes() -> Collection:
    return get_db()["athletes"]


def performances() -> Collection:
    return get_db()["performances"]


def injuries() -> Collection:
    return get_db()["injuries"]


def careers() -> Collection:
    return get_db()["careers"]


def financials() -> Collection:
    return get_db()["financials"]


def activity_logs() -> Collection:
    return get_db()["activity_logs"]


def audit_events() -> Collection:
    return get_db()["audit_events"]
