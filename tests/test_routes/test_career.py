from datetime import timedelta

from athletehub import db
from athletehub.utils.serialize import utcnow


def test_profile_create_then_update(client, athlete, make_user):
    url = f"/api/career/athlete/{athlete.id}"
    headers = athlete.user.headers

    res = client.get(url, headers=headers)
    assert res.status_code == 404
    assert res.json()["message"] == "Career profile not found"

    res = client.post(url, json={"current_status": "semi-professional"}, headers=headers)
    assert res.status_code == 201
    assert res.json()["data"]["career"]["current_status"] == "semi-professional"

    res = client.post(url, json={"summary": "National level sprinter"}, headers=headers)
    assert res.status_code == 200
    career = res.json()["data"]["career"]
    assert career["summary"] == "National level sprinter"
    assert career["current_status"] == "semi-professional"
    assert db.careers().count_documents({}) == 1

    scout = make_user("scout")
    assert client.get(url, headers=scout.headers).status_code == 200
    assert client.post(url, json={"summary": "x"}, headers=scout.headers).status_code == 403


def test_goal_materializes_profile(client, athlete):
    res = client.post(f"/api/career/athlete/{athlete.id}/goals", json={"title": "Qualify for nationals"},
                      headers=athlete.user.headers)
    assert res.status_code == 201
    goal = res.json()["data"]["goal"]
    assert goal["created_by"] == athlete.user.id
    assert goal["status"] == "not_started"
    career = db.careers().find_one({})
    assert len(career["goals"]) == 1
    assert career["skills"] == []


def test_goal_update_delete(client, athlete, coach):
    base = f"/api/career/athlete/{athlete.id}/goals"
    res = client.post(base, json={"title": "Sub 11s"}, headers=coach.headers)
    goal_id = res.json()["data"]["goal"]["_id"]

    res = client.put(f"{base}/{goal_id}", json={"progress": 40, "status": "in_progress"},
                     headers=athlete.user.headers)
    assert res.status_code == 200
    assert res.json()["data"]["goal"]["progress"] == 40

    res = client.delete(f"{base}/{goal_id}", headers=athlete.user.headers)
    assert res.status_code == 200
    assert res.json()["message"] == "Goal deleted"
    res = client.delete(f"{base}/{goal_id}", headers=athlete.user.headers)
    assert res.status_code == 404


def test_update_without_profile(client, athlete):
    res = client.put(f"/api/career/athlete/{athlete.id}/goals/5f0c0c0c0c0c0c0c0c0c0c0c",
                     json={"progress": 10}, headers=athlete.user.headers)
    assert res.status_code == 404
    assert res.json()["message"] == "Career profile not found"


def test_skills_are_coach_assessed(client, athlete, coach):
    base = f"/api/career/athlete/{athlete.id}/skills"
    res = client.post(base, json={"skill": "block start", "rating": 6}, headers=athlete.user.headers)
    assert res.status_code == 403
    assert res.json()["message"] == "Not authorized to add assessment for this athlete"

    res = client.post(base, json={"skill": "block start", "category": "technical", "rating": 6},
                      headers=coach.headers)
    assert res.status_code == 201
    skill = res.json()["data"]["skill"]
    assert skill["assessed_by"] == coach.id

    res = client.put(f"{base}/{skill['_id']}", json={"rating": 7}, headers=athlete.user.headers)
    assert res.status_code == 403
    res = client.put(f"{base}/{skill['_id']}", json={"rating": 7}, headers=coach.headers)
    assert res.status_code == 200


def test_training_program_by_coach(client, athlete, coach):
    res = client.post(f"/api/career/athlete/{athlete.id}/training",
                      json={"title": "Winter base", "focus": ["endurance"]}, headers=coach.headers)
    assert res.status_code == 201
    assert res.json()["data"]["training_program"]["created_by"] == coach.id


def test_competitions_mentors_opportunities(client, athlete):
    headers = athlete.user.headers
    base = f"/api/career/athlete/{athlete.id}"
    res = client.post(f"{base}/competitions", json={"name": "State Meet", "level": "state",
                                                     "date": (utcnow() + timedelta(days=20)).isoformat()},
                      headers=headers)
    assert res.status_code == 201
    res = client.post(f"{base}/mentors", json={"name": "P. T. Usha", "expertise": ["sprints"]}, headers=headers)
    assert res.status_code == 201
    res = client.post(f"{base}/opportunities", json={"type": "scholarship", "title": "Sports quota"},
                      headers=headers)
    assert res.status_code == 201

    career = db.careers().find_one({})
    assert len(career["competitions"]) == len(career["mentors"]) == len(career["opportunities"]) == 1


def test_competition_requires_date(client, athlete):
    res = client.post(f"/api/career/athlete/{athlete.id}/competitions", json={"name": "State Meet"},
                      headers=athlete.user.headers)
    assert res.status_code == 400


def test_analytics_and_recommendations(client, athlete, coach):
    base = f"/api/career/athlete/{athlete.id}"
    headers = athlete.user.headers
    client.post(f"{base}/competitions", json={"name": "District", "result": "Win",
                                              "date": (utcnow() - timedelta(days=30)).isoformat()},
                headers=headers)
    client.post(f"{base}/competitions", json={"name": "Zonal", "result": "3rd",
                                              "date": (utcnow() - timedelta(days=10)).isoformat()},
                headers=headers)
    client.post(f"{base}/skills", json={"skill": "start", "category": "technical", "rating": 8},
                headers=coach.headers)

    res = client.get(f"{base}/analytics", headers=headers)
    analytics = res.json()["data"]["analytics"]
    assert analytics["win_rate"] == 50
    assert analytics["skills_breakdown"]["technical"]["average_rating"] == 8

    res = client.get(f"{base}/recommendations", headers=headers)
    assert "short_term" in res.json()["data"]["recommendations"]


def test_document_upload_and_delete_profile(client, athlete, upload_dir):
    base = f"/api/career/athlete/{athlete.id}"
    res = client.post(f"{base}/documents", files={"file": ("cv.pdf", b"%PDF", "application/pdf")},
                      headers=athlete.user.headers)
    assert res.status_code == 201
    doc = res.json()["data"]["document"]
    stored = upload_dir / "career" / doc["filename"]
    assert stored.exists()

    res = client.delete(base, headers=athlete.user.headers)
    assert res.status_code == 200
    assert db.careers().count_documents({}) == 0
    assert not stored.exists()
