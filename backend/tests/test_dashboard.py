from __future__ import annotations


def _assign(client, refs, hours, faculty=None):
    r = client.post(
        "/api/workload-assignments",
        json={
            "facultyId": (faculty or refs["faculty"])["id"],
            "subjectId": refs["subject"]["id"],
            "divisionId": refs["division"]["id"],
            "type": "lecture",
            "hoursPerWeek": hours,
        },
    )
    assert r.status_code == 201, r.text
    return r.json()


def test_empty_system_reports_zeros(client):
    r = client.get("/api/dashboard/stats")
    assert r.status_code == 200
    assert r.json() == {"totalFaculty": 0, "activeCourses": 0, "pendingTasks": 0, "avgWorkload": 0}


def test_stats_average_and_pending(client, assignment_refs, make_faculty, make_subject):
    second = make_faculty(position="assistant_professor")
    third = make_faculty(position="associate_professor")
    make_subject()

    first = _assign(client, assignment_refs, 4)
    _assign(client, assignment_refs, 3, faculty=second)
    _assign(client, assignment_refs, 3, faculty=third)

    r = client.patch(f"/api/workload-assignments/{first['id']}/status", json={"status": "pending"})
    assert r.status_code == 200

    stats = client.get("/api/dashboard/stats").json()
    assert stats["totalFaculty"] == 3
    assert stats["activeCourses"] == 2
    assert stats["pendingTasks"] == 1
    # (4 + 3 + 3) / 3
    assert stats["avgWorkload"] == 3.3


def test_completed_assignments_are_not_pending(client, assignment_refs):
    a = _assign(client, assignment_refs, 2)
    client.patch(f"/api/workload-assignments/{a['id']}/status", json={"status": "completed"})
    assert client.get("/api/dashboard/stats").json()["pendingTasks"] == 0


def test_workload_overview_levels(client, assignment_refs, make_faculty):
    other = make_faculty(position="assistant_professor", department="Mathematics")
    _assign(client, assignment_refs, 13)
    _assign(client, assignment_refs, 2, faculty=other)

    rows = client.get("/api/dashboard/workload").json()
    by_id = {row["facultyId"]: row for row in rows}

    prof = by_id[assignment_refs["faculty"]["id"]]
    assert prof["currentHours"] == 13
    assert prof["maxHours"] == 14
    assert prof["percentage"] == 92.9
    assert prof["status"] == "at_limit"
    assert prof["assignmentCount"] == 1

    assert by_id[other["id"]]["status"] == "under_limit"

    maths = client.get("/api/dashboard/workload", params={"department": "Mathematics"}).json()
    assert [row["facultyId"] for row in maths] == [other["id"]]
