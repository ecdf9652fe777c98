from __future__ import annotations


def test_create_derives_max_hours_from_position(client):
    r = client.post(
        "/api/faculty",
        json={
            "name": "Dr. Rajesh Kumar",
            "email": "rajesh.kumar@college.edu",
            "position": "professor",
            "department": "Computer Science",
            "maxHours": 30,
        },
    )
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["maxHours"] == 14
    assert body["currentHours"] == 0
    assert set(body) == {"id", "name", "email", "position", "department", "maxHours", "currentHours"}


def test_positions_map_to_their_ceiling(make_faculty):
    assert make_faculty(position="associate_professor")["maxHours"] == 16
    assert make_faculty(position="assistant_professor")["maxHours"] == 18


def test_invalid_payload_is_rejected_with_field_errors(client):
    r = client.post(
        "/api/faculty",
        json={"name": "", "email": "not-an-email", "position": "dean", "department": "CS"},
    )
    assert r.status_code == 400
    body = r.json()
    assert body["message"] == "Invalid data"
    fields = {e["field"] for e in body["errors"]}
    assert {"name", "email", "position"} <= fields
    assert client.get("/api/faculty").json() == []


def test_duplicate_email_conflicts(client, make_faculty):
    make_faculty(email="same@college.edu")
    r = client.post(
        "/api/faculty",
        json={"name": "Other", "email": "same@college.edu", "position": "professor", "department": "CS"},
    )
    assert r.status_code == 409
    assert "already exists" in r.json()["message"]


def test_list_and_department_filter(client, make_faculty):
    make_faculty(department="Physics")
    make_faculty(department="Mathematics")

    assert len(client.get("/api/faculty").json()) == 2
    physics = client.get("/api/faculty", params={"department": "Physics"}).json()
    assert [f["department"] for f in physics] == ["Physics"]


def test_get_includes_assignments(client, assignment_refs):
    faculty = assignment_refs["faculty"]
    client.post(
        "/api/workload-assignments",
        json={
            "facultyId": faculty["id"],
            "subjectId": assignment_refs["subject"]["id"],
            "divisionId": assignment_refs["division"]["id"],
            "type": "practical",
            "hoursPerWeek": 4,
            "classroom": "LAB-2",
        },
    )

    body = client.get(f"/api/faculty/{faculty['id']}").json()
    assert body["currentHours"] == 4
    assert len(body["assignments"]) == 1
    assert body["assignments"][0]["subject"]["code"] == assignment_refs["subject"]["code"]


def test_unknown_faculty_is_404(client):
    assert client.get("/api/faculty/999").status_code == 404
    r = client.patch("/api/faculty/999", json={"name": "X"})
    assert r.status_code == 404
    assert r.json() == {"message": "Faculty not found"}
    assert client.delete("/api/faculty/999").status_code == 404


def test_patch_position_rederives_max_hours(client, make_faculty):
    f = make_faculty(position="professor")
    r = client.patch(f"/api/faculty/{f['id']}", json={"position": "assistant_professor"})
    assert r.status_code == 200
    assert r.json()["maxHours"] == 18

    r = client.patch(f"/api/faculty/{f['id']}", json={"maxHours": 20, "name": "Renamed"})
    body = r.json()
    assert (body["maxHours"], body["name"], body["position"]) == (20, "Renamed", "assistant_professor")


def test_patch_cannot_touch_current_hours(client, make_faculty):
    f = make_faculty()
    r = client.patch(f"/api/faculty/{f['id']}", json={"currentHours": 12})
    assert r.status_code == 200
    assert r.json()["currentHours"] == 0


def test_delete_faculty(client, make_faculty):
    f = make_faculty()
    r = client.delete(f"/api/faculty/{f['id']}")
    assert r.status_code == 200
    assert r.json() == {"message": "Faculty deleted successfully"}
    assert client.get(f"/api/faculty/{f['id']}").status_code == 404


def test_delete_faculty_with_assignments_conflicts(client, assignment_refs):
    faculty = assignment_refs["faculty"]
    client.post(
        "/api/workload-assignments",
        json={
            "facultyId": faculty["id"],
            "subjectId": assignment_refs["subject"]["id"],
            "divisionId": assignment_refs["division"]["id"],
            "type": "lecture",
            "hoursPerWeek": 2,
        },
    )
    assert client.delete(f"/api/faculty/{faculty['id']}").status_code == 409
