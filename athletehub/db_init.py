from athletehub import db
from athletehub.utils.audit import ensure_audit_indexes


def ensure_indexes():
    # identity
    db.users().create_index("email", unique=True)
    db.users().create_index("refresh_token", sparse=True)
    db.users().create_index("verification_token", sparse=True)
    db.users().create_index("reset_password_token", sparse=True)

    # one athlete profile per user
    db.athletes().create_index("user", unique=True)
    db.athletes().create_index("primary_sport")

    # per-athlete records
    db.performances().create_index([("athlete", 1), ("date", -1)])
    db.injuries().create_index([("athlete", 1), ("date_of_injury", -1)])
    db.injuries().create_index("status")
    db.careers().create_index("athlete", unique=True)
    db.financials().create_index("athlete", unique=True)

    # activity / audit
    db.activity_logs().create_index([("user_id", 1), ("timestamp", -1)])
    ensure_audit_indexes()
