from __future__ import annotations


def _slot(refs, **overrides):
    payload = {
        "divisionId": refs["division"]["id"],
        "facultyId": refs["faculty"]["id"],
        "subjectId": refs["subject"]["id"],
        "dayOfWeek": 0,
        "startTime": "09:00",
        "endTime": "10:00",
        "classroom": "CS-101",
        "type": "lecture",
    }
    payload.update(overrides)
    return payload


def test_create_accepts_day_names(client, assignment_refs):
    r = client.post("/api/timetable", json=_slot(assignment_refs, dayOfWeek="Wednesday"))
    assert r.status_code == 201, r.text
    assert r.json()["dayOfWeek"] == 2

    r = client.post("/api/timetable", json=_slot(assignment_refs, dayOfWeek="fri"))
    assert r.json()["dayOfWeek"] == 4


def test_create_rejects_bad_day_and_time_order(client, assignment_refs):
    assert client.post("/api/timetable", json=_slot(assignment_refs, dayOfWeek="Funday")).status_code == 400
    assert client.post("/api/timetable", json=_slot(assignment_refs, dayOfWeek=7)).status_code == 400
    assert client.post("/api/timetable", json=_slot(assignment_refs, startTime="9am")).status_code == 400

    r = client.post("/api/timetable", json=_slot(assignment_refs, startTime="11:00", endTime="10:00"))
    assert r.status_code == 400
    assert "endTime must be after startTime" in r.json()["errors"][0]["message"]


def test_list_by_division_or_faculty(client, assignment_refs, make_division):
    other_division = make_division()
    client.post("/api/timetable", json=_slot(assignment_refs, dayOfWeek=1, startTime="11:00", endTime="12:00"))
    client.post("/api/timetable", json=_slot(assignment_refs))
    client.post("/api/timetable", json=_slot(assignment_refs, divisionId=other_division["id"]))

    rows = client.get("/api/timetable", params={"divisionId": assignment_refs["division"]["id"]}).json()
    assert [(s["dayOfWeek"], s["startTime"]) for s in rows] == [(0, "09:00"), (1, "11:00")]
    assert rows[0]["subject"]["code"] == assignment_refs["subject"]["code"]

    by_faculty = client.get("/api/timetable", params={"facultyId": assignment_refs["faculty"]["id"]}).json()
    assert len(by_faculty) == 3


def test_update_checks_merged_times(client, assignment_refs):
    slot = client.post("/api/timetable", json=_slot(assignment_refs)).json()

    r = client.patch(f"/api/timetable/{slot['id']}", json={"endTime": "08:30"})
    assert r.status_code == 400
    assert r.json()["errors"][0]["field"] == "endTime"

    r = client.patch(f"/api/timetable/{slot['id']}", json={"endTime": "10:30", "classroom": "LAB-1", "dayOfWeek": "Tue"})
    assert r.status_code == 200
    body = r.json()
    assert (body["endTime"], body["classroom"], body["dayOfWeek"]) == ("10:30", "LAB-1", 1)


def test_delete_and_missing_slot(client, assignment_refs):
    slot = client.post("/api/timetable", json=_slot(assignment_refs)).json()
    r = client.delete(f"/api/timetable/{slot['id']}")
    assert r.status_code == 200
    assert client.delete(f"/api/timetable/{slot['id']}").status_code == 404
    assert client.patch("/api/timetable/999", json={"classroom": "X"}).status_code == 404
