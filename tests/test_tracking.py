import asyncio

from conftest import fetch_rows
from fitcoach.crud import tracking as tracking_crud


def test_untracked_day_reads_as_defaults(client, auth):
    data = client.get("/tracking/2026-03-02", headers=auth).json()["data"]
    assert data == {"date": "2026-03-02", "water_intake": 0, "steps": 0, "weight_kg": None, "distance_km": None}
    assert fetch_rows("daily_tracking") == []


def test_upsert_keeps_fields_not_sent(client, auth, user):
    client.put("/tracking/2026-03-02", headers=auth, json={"steps": 8000, "weight_kg": 80.4})
    data = client.put("/tracking/2026-03-02", headers=auth, json={"distance_km": 5.2}).json()["data"]
    assert (data["steps"], data["weight_kg"], data["distance_km"]) == (8000, 80.4, 5.2)
    assert len(fetch_rows("daily_tracking", user_id=user["id"])) == 1


def test_water_intake_accumulates(client, auth):
    client.post("/tracking/2026-03-02/water", headers=auth, json={"amount": 500})
    data = client.post("/tracking/2026-03-02/water", headers=auth, json={"amount": 250}).json()["data"]
    assert data["water_intake"] == 750


def test_water_increments_do_not_overwrite_each_other(client, auth, user):
    client.put("/tracking/2026-03-02", headers=auth, json={"steps": 5000})

    async def add_concurrently():
        await asyncio.gather(*(tracking_crud.add_water(user["id"], "2026-03-02", 100) for _ in range(5)))

    client.portal.call(add_concurrently)
    data = client.get("/tracking/2026-03-02", headers=auth).json()["data"]
    assert (data["water_intake"], data["steps"]) == (500, 5000)
    assert len(fetch_rows("daily_tracking", user_id=user["id"])) == 1


def test_water_amount_must_be_positive(client, auth):
    response = client.post("/tracking/2026-03-02/water", headers=auth, json={"amount": 0})
    assert response.status_code == 400


def test_tracking_range(client, auth):
    for day, steps in (("2026-03-03", 4000), ("2026-03-01", 6000), ("2026-03-10", 9000)):
        client.put(f"/tracking/{day}", headers=auth, json={"steps": steps})
    data = client.get("/tracking?start_date=2026-03-01&end_date=2026-03-07", headers=auth).json()["data"]
    assert [(d["date"], d["steps"]) for d in data] == [("2026-03-01", 6000), ("2026-03-03", 4000)]

    response = client.get("/tracking?start_date=2026-03-07&end_date=2026-03-01", headers=auth)
    assert response.status_code == 400


def test_negative_steps_are_rejected(client, auth):
    response = client.put("/tracking/2026-03-02", headers=auth, json={"steps": -1})
    assert response.status_code == 400
