def _create(client, **overrides):
    body = {"title": "Planning", "start": "2024-06-10T09:00:00", "end": "2024-06-10T10:00:00"}
    body.update(overrides)
    response = client.post("/events", json=body)
    assert response.status_code == 201
    return response.json()


def test_move_keeps_times_and_persists(client):
    event = _create(client)
    response = client.post(f"/events/{event['id']}/reschedule", json={"kind": "move", "dropDate": "2024-06-15"})
    assert response.status_code == 200
    moved = response.json()
    assert moved["start"].startswith("2024-06-15T09:00")
    assert moved["end"].startswith("2024-06-15T10:00")
    assert moved["id"] == moved["_id"] == event["id"]

    stored = client.get(f"/events/{event['id']}").json()
    assert stored["start"] == moved["start"]


def test_resize_end_extends_event(client):
    event = _create(client)
    response = client.post(f"/events/{event['id']}/reschedule", json={"kind": "resize-end", "dropDate": "2024-06-12"})
    assert response.status_code == 200
    assert response.json()["end"].startswith("2024-06-12T10:00")
    assert response.json()["start"].startswith("2024-06-10T09:00")


def test_resize_start_after_end_is_rejected(client):
    event = _create(client)
    response = client.post(f"/events/{event['id']}/reschedule", json={"kind": "resize-start", "dropDate": "2024-06-11"})
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "DROP_INVALID"

    # nothing was written
    stored = client.get(f"/events/{event['id']}").json()
    assert stored["start"].startswith("2024-06-10T09:00")


def test_reschedule_missing_event(client):
    response = client.post("/events/missing/reschedule", json={"dropDate": "2024-06-11"})
    assert response.status_code == 404


def test_reschedule_bad_body(client):
    event = _create(client)
    response = client.post(f"/events/{event['id']}/reschedule", json={"kind": "teleport", "dropDate": "2024-06-11"})
    assert response.status_code == 422


def test_move_past_the_representable_range_is_rejected(client):
    event = _create(client, end="2024-06-12T10:00:00")
    response = client.post(f"/events/{event['id']}/reschedule", json={"kind": "move", "dropDate": "9999-12-31"})
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "DROP_INVALID"
