from datetime import datetime

from athletehub.utils.serialize import as_utc

RECOMMENDATIONS = {
    "short_term": [
        "Focus on upcoming competitions",
        "Work on identified skill gaps",
    ],
    "medium_term": [
        "Consider participating in national championships",
        "Explore sponsorship opportunities",
    ],
    "long_term": [
        "Plan for career transition after competitive years",
        "Build personal brand and network",
    ],
    "education_pathways": [
        "Sports management degree programs",
        "Coaching certifications",
    ],
    "career_transitions": [
        "Coaching and mentoring",
        "Sports commentary and analysis",
        "Sports administration",
    ],
}


def recommendations() -> dict:
    # fresh copies of the static table
    return {k: list(v) for k, v in RECOMMENDATIONS.items()}


def summarize(career: dict, now: datetime) -> dict:
    competitions = career.get("competitions") or []
    upcoming = [c for c in competitions if as_utc(c["date"]) > now]
    completed = [c for c in competitions if as_utc(c["date"]) <= now]
    wins = sum(1 for c in completed if "win" in (c.get("result") or "").lower())

    skills = {}
    for s in career.get("skills") or []:
        bucket = skills.setdefault(s.get("category") or "general", {"count": 0, "total_rating": 0.0})
        bucket["count"] += 1
        bucket["total_rating"] += s.get("rating") or 0
    for bucket in skills.values():
        bucket["average_rating"] = bucket["total_rating"] / bucket["count"]

    goals = career.get("goals") or []
    return {
        "total_competitions": len(competitions),
        "upcoming_competitions": len(upcoming),
        "completed_competitions": len(completed),
        "wins": wins,
        "win_rate": (wins / len(completed)) * 100 if completed else 0,
        "skills_breakdown": skills,
        "career_progress": {
            "goals_completed": sum(1 for g in goals if g.get("status") == "completed"),
            "goals_in_progress": sum(1 for g in goals if g.get("status") == "in_progress"),
            "total_goals": len(goals),
        },
    }
