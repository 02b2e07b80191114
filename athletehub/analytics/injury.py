import math
from collections import Counter
from datetime import datetime, timedelta
from typing import List

from athletehub.analytics.periods import months_ago
from athletehub.utils.serialize import as_utc

HIGH_RISK_COUNT = 3
RECENT_MONTHS = 3


def _days_between(start: datetime, end: datetime) -> int:
    return math.ceil((as_utc(end) - as_utc(start)).total_seconds() / 86400)


def summarize(injuries: List[dict]) -> dict:
    status_counts = {"active": 0, "recovering": 0, "resolved": 0}
    recovery_days = []
    for i in injuries:
        status_counts[i.get("status", "active")] = status_counts.get(i.get("status", "active"), 0) + 1
        rtp = i.get("return_to_play") or {}
        if i.get("status") == "resolved" and rtp.get("assessed_at"):
            recovery_days.append(_days_between(i["date_of_injury"], rtp["assessed_at"]))

    timeline = sorted(
        (
            {
                "date": as_utc(i["date_of_injury"]),
                "type": i.get("type"),
                "body_part": i.get("body_part"),
                "severity": i.get("severity"),
                "status": i.get("status"),
            }
            for i in injuries
        ),
        key=lambda e: e["date"],
    )
    return {
        "total_injuries": len(injuries),
        "by_body_part": dict(Counter(i.get("body_part") for i in injuries)),
        "by_type": dict(Counter(i.get("type") for i in injuries)),
        "by_severity": dict(Counter(i.get("severity") for i in injuries)),
        "current_status": status_counts,
        "average_recovery_days": sum(recovery_days) / len(recovery_days) if recovery_days else 0,
        "timeline": timeline,
    }


def risk_assessment(injuries: List[dict], now: datetime) -> dict:
    """
    Rule-of-thumb recurrence risk: repeated injuries to the same body part
    and anything recent count as risk factors.
    """
    counts = Counter(i.get("body_part") for i in injuries)
    factors = []
    high_risk = [part for part, n in counts.items() if n >= HIGH_RISK_COUNT]
    for part in high_risk:
        factors.append(f"Multiple injuries ({counts[part]}) to {part}")
    for part, n in counts.items():
        if n > 1 and part not in high_risk:
            factors.append(f"Recurrent injuries to {part}")

    cutoff = months_ago(now, RECENT_MONTHS)
    recent = [i for i in injuries if as_utc(i["date_of_injury"]) >= cutoff]
    if recent:
        factors.append(f"{len(recent)} recent injuries in the last {RECENT_MONTHS} months")

    recs = []
    if high_risk:
        recs.append(f"Focus on strengthening exercises for {', '.join(high_risk)}")
        recs.append("Implement targeted injury prevention program")
    if recent:
        recs.append("Ensure complete rehabilitation before returning to full training")
        recs.append("Consider gradual return to play protocols")
    recs.append("Regular monitoring of training load")
    recs.append("Ensure adequate recovery between training sessions")

    if len(factors) >= 3:
        level = "high"
    elif factors:
        level = "medium"
    else:
        level = "low"

    return {
        "risk_level": level,
        "risk_factors": factors,
        "recommendations": recs,
        "injury_history": {"total": len(injuries), "by_body_part": dict(counts), "recent": len(recent)},
    }


def rehab_progress(injury: dict, now: datetime) -> dict:
    phases = injury.get("rehabilitation_plan") or []
    by_phase = []
    completed = 0
    total_days = 0.0
    done_days = 0.0
    for p in phases:
        status = p.get("status")
        pct = 100 if status == "completed" else 50 if status == "in-progress" else 0
        completed += status == "completed"
        by_phase.append({"_id": p.get("_id"), "name": p.get("name"), "status": status, "progress": pct})
        if p.get("estimated_duration"):
            total_days += p["estimated_duration"]
            done_days += p["estimated_duration"] * pct / 100

    estimated_completion = None
    if total_days:
        estimated_completion = now + timedelta(days=total_days - done_days)

    days_elapsed = _days_between(injury["date_of_injury"], now)
    notes = sorted(injury.get("progress_notes") or [], key=lambda n: as_utc(n["created_at"]), reverse=True)
    return {
        "overall": (completed / len(phases)) * 100 if phases else 0,
        "by_phase": by_phase,
        "timeline": {
            "start_date": as_utc(injury["date_of_injury"]),
            "current_date": now,
            "estimated_completion_date": estimated_completion,
            "days_elapsed": days_elapsed,
            "total_estimated_days": total_days,
            "percentage_time_elapsed": (days_elapsed / total_days) * 100 if total_days else 0,
        },
        "latest_notes": notes[:5],
    }
