from datetime import timedelta

from athletehub import db
from athletehub.utils.serialize import utcnow


def _record(athlete_id, **extra):
    body = {
        "athlete_id": athlete_id,
        "sport": "athletics",
        "type": "training",
        "metrics": [{"name": "speed", "value": 18, "unit": "km/h"}],
    }
    body.update(extra)
    return body


def test_coach_member_can_record(client, athlete, coach):
    res = client.post("/api/performance/", json=_record(athlete.id), headers=coach.headers)
    assert res.status_code == 201
    perf = res.json()["data"]["performance"]
    assert perf["recorded_by"] == coach.id
    assert perf["athlete"] == athlete.id
    assert perf["date"]


def test_outside_coach_cannot_record(client, athlete, make_user):
    outsider = make_user("coach")
    res = client.post("/api/performance/", json=_record(athlete.id), headers=outsider.headers)
    assert res.status_code == 403
    assert res.json() == {"status": "fail", "message": "Not authorized to add performance record for this athlete"}


def test_missing_athlete(client, make_user):
    admin = make_user("admin")
    res = client.post("/api/performance/", json=_record("5f0c0c0c0c0c0c0c0c0c0c0c"), headers=admin.headers)
    assert res.status_code == 404
    assert res.json()["message"] == "Athlete not found"


def test_list_filters(client, athlete):
    headers = athlete.user.headers
    now = utcnow()
    client.post("/api/performance/", json=_record(athlete.id, date=(now - timedelta(days=2)).isoformat()),
                headers=headers)
    client.post("/api/performance/", json=_record(athlete.id, type="competition",
                                                  date=(now - timedelta(days=60)).isoformat()), headers=headers)

    res = client.get(f"/api/performance/athlete/{athlete.id}", headers=headers)
    assert res.json()["data"]["results"] == 2

    res = client.get(f"/api/performance/athlete/{athlete.id}", params={"type": "competition"}, headers=headers)
    assert res.json()["data"]["results"] == 1

    since = (now - timedelta(days=7)).isoformat()
    res = client.get(f"/api/performance/athlete/{athlete.id}", params={"start_date": since}, headers=headers)
    assert res.json()["data"]["results"] == 1


def test_update_and_delete_rules(client, athlete, coach, make_user):
    res = client.post("/api/performance/", json=_record(athlete.id), headers=coach.headers)
    perf_id = res.json()["data"]["performance"]["_id"]

    scout = make_user("scout")
    res = client.put(f"/api/performance/{perf_id}", json={"notes": "x"}, headers=scout.headers)
    assert res.status_code == 403
    assert res.json()["message"] == "Not authorized to update this performance record"

    res = client.put(f"/api/performance/{perf_id}", json={"notes": "Good start", "rating": 8},
                     headers=athlete.user.headers)
    assert res.status_code == 200
    assert res.json()["data"]["performance"]["rating"] == 8

    # the recorder can still edit after leaving the coach list
    client.delete(f"/api/athletes/{athlete.id}/coaches/{coach.id}", headers=athlete.user.headers)
    res = client.put(f"/api/performance/{perf_id}", json={"notes": "again"}, headers=coach.headers)
    assert res.status_code == 200

    res = client.delete(f"/api/performance/{perf_id}", headers=coach.headers)
    assert res.status_code == 200
    res = client.get(f"/api/performance/{perf_id}", headers=athlete.user.headers)
    assert res.status_code == 404
    assert res.json()["message"] == "Performance record not found"


def test_analytics_endpoints(client, athlete):
    headers = athlete.user.headers
    for speed in (10, 20):
        client.post("/api/performance/", json=_record(athlete.id, metrics=[{"name": "speed", "value": speed}]),
                    headers=headers)

    res = client.get(f"/api/performance/athlete/{athlete.id}/analytics", params={"period": "week"}, headers=headers)
    analytics = res.json()["data"]["analytics"]
    assert analytics["total_records"] == 2
    assert analytics["average_scores"]["speed"] == 15

    res = client.get(f"/api/performance/athlete/{athlete.id}/analytics", params={"period": "decade"},
                     headers=headers)
    assert res.status_code == 400

    res = client.get(f"/api/performance/athlete/{athlete.id}/compare", headers=headers)
    assert res.json()["data"]["comparison"]["percentiles"]["speed"] == 75

    res = client.get(f"/api/performance/athlete/{athlete.id}/trends",
                     params={"metric": "speed", "interval": "month"}, headers=headers)
    assert len(res.json()["data"]["trends"]) == 1

    res = client.get(f"/api/performance/athlete/{athlete.id}/recommendations", headers=headers)
    assert res.json()["data"]["recommendations"]["areas_for_improvement"] == ["Focus on improving speed"]


def test_video_upload_and_annotation(client, athlete, coach):
    res = client.post("/api/performance/", json=_record(athlete.id), headers=coach.headers)
    perf_id = res.json()["data"]["performance"]["_id"]

    res = client.post(
        f"/api/performance/{perf_id}/video",
        files={"file": ("clip.pdf", b"%PDF", "application/pdf")},
        headers=coach.headers,
    )
    assert res.status_code == 400

    res = client.post(
        f"/api/performance/{perf_id}/video",
        files={"file": ("sprint.mp4", b"\x00\x00\x00\x18ftypmp42", "video/mp4")},
        data={"title": "Start drill"},
        headers=coach.headers,
    )
    assert res.status_code == 201
    video = res.json()["data"]["video"]
    assert video["url"].startswith("/uploads/videos/")
    assert video["title"] == "Start drill"

    res = client.post(
        f"/api/performance/{perf_id}/video/{video['_id']}/annotations",
        json={"timestamp": 3.5, "note": "Drive phase too short"},
        headers=coach.headers,
    )
    assert res.status_code == 201
    stored = db.performances().find_one({})
    assert stored["videos"][0]["annotations"][0]["note"] == "Drive phase too short"

    # the athlete did not record this session
    res = client.post(
        f"/api/performance/{perf_id}/video/{video['_id']}/annotations",
        json={"timestamp": 4.0, "note": "Felt fine"},
        headers=athlete.user.headers,
    )
    assert res.status_code == 403
    assert res.json()["message"] == "Not authorized to add annotation for this athlete"


def test_skill_assessments(client, athlete, coach, make_user):
    res = client.post("/api/performance/", json=_record(athlete.id), headers=athlete.user.headers)
    perf_id = res.json()["data"]["performance"]["_id"]

    res = client.post(f"/api/performance/{perf_id}/skill-assessment", json={"skill": "start", "rating": 7},
                      headers=athlete.user.headers)
    assert res.status_code == 403

    res = client.post(f"/api/performance/{perf_id}/skill-assessment", json={"skill": "start", "rating": 7},
                      headers=coach.headers)
    assert res.status_code == 201
    assessment = res.json()["data"]["assessment"]
    assert assessment["assessed_by"] == coach.id

    other = make_user("coach")
    url = f"/api/performance/{perf_id}/skill-assessment/{assessment['_id']}"
    assert client.put(url, json={"rating": 9}, headers=other.headers).status_code == 403
    res = client.put(url, json={"rating": 9}, headers=coach.headers)
    assert res.status_code == 200
    assert res.json()["data"]["assessment"]["rating"] == 9
