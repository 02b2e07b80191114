from datetime import datetime, timezone

import pytest

from athletehub import db
from athletehub.analytics.financial import TAX_DISCLAIMER


@pytest.fixture
def advisor(make_user):
    return make_user("financial_advisor")


def _income(amount=50000, when="2024-03-10T00:00:00Z", **extra):
    return {"category": "prize", "amount": amount, "date": when, **extra}


def test_advisor_coach_scenario(client, athlete, coach, advisor, make_user):
    base = f"/api/financial/athlete/{athlete.id}/income"

    res = client.post(base, json=_income(), headers=advisor.headers)
    assert res.status_code == 201
    income = res.json()["data"]["income"]
    assert income["recorded_by"] == advisor.id

    res = client.put(f"{base}/{income['_id']}", json={"description": "State meet prize"}, headers=advisor.headers)
    assert res.status_code == 200
    assert res.json()["data"]["income"]["description"] == "State meet prize"

    other_advisor = make_user("financial_advisor")
    res = client.put(f"{base}/{income['_id']}", json={"amount": 45000}, headers=other_advisor.headers)
    assert res.status_code == 200

    res = client.put(f"{base}/{income['_id']}", json={"amount": 1}, headers=coach.headers)
    assert res.status_code == 403
    assert res.json()["message"] == "Not authorized to update this financial data"


def test_coach_cannot_read_or_create(client, athlete, coach):
    res = client.post(f"/api/financial/athlete/{athlete.id}/income", json=_income(), headers=coach.headers)
    assert res.status_code == 403
    assert res.json()["message"] == "Not authorized to add financial data for this athlete"
    res = client.get(f"/api/financial/athlete/{athlete.id}", headers=coach.headers)
    assert res.status_code == 403


def test_profile_lifecycle(client, athlete):
    url = f"/api/financial/athlete/{athlete.id}"
    headers = athlete.user.headers
    assert client.get(url, headers=headers).status_code == 404

    res = client.post(url, json={"currency": "usd"}, headers=headers)
    assert res.status_code == 201
    assert res.json()["data"]["financial"]["currency"] == "USD"

    res = client.post(url, json={"notes": "Quarterly review"}, headers=headers)
    assert res.status_code == 200
    assert res.json()["data"]["financial"]["currency"] == "USD"

    res = client.delete(url, headers=headers)
    assert res.status_code == 200
    assert db.financials().count_documents({}) == 0


def test_line_item_validation(client, athlete):
    res = client.post(f"/api/financial/athlete/{athlete.id}/expense",
                      json={"category": "travel", "amount": -5, "date": "2024-03-10T00:00:00Z"},
                      headers=athlete.user.headers)
    assert res.status_code == 400
    assert res.json()["status"] == "fail"


def test_all_line_item_kinds(client, athlete):
    base = f"/api/financial/athlete/{athlete.id}"
    headers = athlete.user.headers
    bodies = {
        "expense": {"category": "travel", "amount": 2000, "date": "2024-03-12T00:00:00Z", "tax_deductible": True},
        "sponsorship": {"sponsor": "Acme Sports", "value": 100000, "status": "active"},
        "investment": {"type": "mutual_funds", "amount": 10000, "current_value": 11000},
        "goal": {"name": "Emergency fund", "type": "savings", "target_amount": 60000},
    }
    for path, body in bodies.items():
        res = client.post(f"{base}/{path}", json=body, headers=headers)
        assert res.status_code == 201, path
        assert res.json()["data"][path]["recorded_by"] == athlete.user.id

    doc = db.financials().find_one({})
    for field in ("expenses", "sponsorships", "investments", "goals"):
        assert len(doc[field]) == 1
    assert doc["currency"] == "INR"


def test_analytics_and_tax(client, athlete):
    base = f"/api/financial/athlete/{athlete.id}"
    headers = athlete.user.headers
    client.post(f"{base}/income", json=_income(60000), headers=headers)
    client.post(f"{base}/expense", json={"category": "training", "amount": 10000, "date": "2024-03-15T00:00:00Z",
                                          "tax_deductible": True}, headers=headers)

    res = client.get(f"{base}/analytics", params={"year": 2024, "month": 3}, headers=headers)
    summary = res.json()["data"]["analytics"]["summary"]
    assert summary["total_income"] == 60000
    assert summary["net_income"] == 50000

    res = client.get(f"{base}/analytics", params={"year": 2023}, headers=headers)
    assert res.json()["data"]["analytics"]["summary"]["total_income"] == 0

    res = client.get(f"{base}/tax-summary", headers=headers)
    assert res.status_code == 400
    assert res.json()["message"] == "Tax year is required"

    res = client.get(f"{base}/tax-summary", params={"year": 2024}, headers=headers)
    tax = res.json()["data"]["tax_summary"]
    assert tax["taxable_income"] == 50000
    assert tax["estimated_tax"] == 7000
    assert tax["disclaimer"] == TAX_DISCLAIMER


def test_recommendations(client, athlete, advisor):
    base = f"/api/financial/athlete/{athlete.id}"
    now = datetime.now(timezone.utc).isoformat()
    client.post(f"{base}/income", json=_income(1000, when=now), headers=advisor.headers)
    client.post(f"{base}/expense", json={"category": "travel", "amount": 3000, "date": now},
                headers=advisor.headers)

    res = client.get(f"{base}/recommendations", headers=athlete.user.headers)
    data = res.json()["data"]
    assert data["recommendations"]["budgeting"][0].startswith("Your expenses exceed your income")
    assert data["financial_summary"]["savings_rate"] < 0


def test_documents(client, athlete, advisor, upload_dir):
    base = f"/api/financial/athlete/{athlete.id}/documents"
    res = client.post(base, files={"file": ("itr.pdf", b"%PDF", "application/pdf")}, headers=advisor.headers)
    assert res.status_code == 201
    doc = res.json()["data"]["document"]
    assert (upload_dir / "financial" / doc["filename"]).exists()

    res = client.delete(f"{base}/{doc['_id']}", headers=athlete.user.headers)
    assert res.status_code == 200
    assert db.financials().find_one({})["documents"] == []
