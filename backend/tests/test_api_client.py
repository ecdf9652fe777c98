from __future__ import annotations

import pytest

from client import ApiError, CollegeApiClient


FACULTY = {"name": "Dr. A", "email": "a@college.edu", "position": "professor", "department": "Computer Science"}


@pytest.fixture
def api(client) -> CollegeApiClient:
    return CollegeApiClient(client)


@pytest.fixture
def refs(api):
    faculty = api.create_faculty(FACULTY)
    subject = api.create_subject({"name": "Algorithms", "code": "CS401", "department": "Computer Science", "credits": 4})
    division = api.create_division(
        {"name": "CE A", "code": "CE-A", "department": "Computer Science", "semester": 7, "academicYear": "2024-25"}
    )
    return faculty, subject, division


def test_reads_are_cached_until_a_mutation(api, client):
    assert api.list_faculty() == []

    # A write that bypasses the data layer is invisible to cached reads.
    client.post("/api/faculty", json=FACULTY)
    assert api.list_faculty() == []

    api.create_faculty({**FACULTY, "email": "b@college.edu"})
    assert [f["email"] for f in api.list_faculty()] == ["a@college.edu", "b@college.edu"]


def test_cache_key_includes_query_params(api):
    api.create_faculty(FACULTY)
    api.create_faculty({**FACULTY, "email": "m@college.edu", "department": "Mathematics"})

    assert len(api.list_faculty()) == 2
    assert len(api.list_faculty(department="Mathematics")) == 1
    assert api.cached_paths() == ["/api/faculty"]


def test_assignment_mutations_refresh_faculty_and_dashboard(api, refs):
    faculty, subject, division = refs
    api.list_timetable()
    assert api.get_faculty(faculty["id"])["currentHours"] == 0
    assert api.dashboard_stats()["avgWorkload"] == 0

    assignment = api.create_workload_assignment(
        {
            "facultyId": faculty["id"],
            "subjectId": subject["id"],
            "divisionId": division["id"],
            "type": "lecture",
            "hoursPerWeek": 4,
        }
    )
    assert api.cached_paths() == ["/api/timetable"]
    assert api.get_faculty(faculty["id"])["currentHours"] == 4
    assert api.dashboard_stats()["avgWorkload"] == 4.0

    api.update_workload_assignment_status(assignment["id"], "pending")
    assert api.dashboard_stats()["pendingTasks"] == 1

    api.delete_workload_assignment(assignment["id"])
    assert api.get_faculty(faculty["id"])["currentHours"] == 0
    assert api.list_workload_assignments() == []


def test_timetable_mutations_only_touch_timetable(api, refs):
    faculty, subject, division = refs
    api.list_faculty()
    api.list_timetable(division_id=division["id"])

    api.create_timetable_slot(
        {
            "divisionId": division["id"],
            "facultyId": faculty["id"],
            "subjectId": subject["id"],
            "dayOfWeek": "Monday",
            "startTime": "09:00",
            "endTime": "10:00",
            "classroom": "CS-101",
            "type": "lecture",
        }
    )
    assert api.cached_paths() == ["/api/faculty"]
    assert len(api.list_timetable(division_id=division["id"])) == 1


def test_renames_refresh_listings_that_embed_the_row(api, refs):
    faculty, subject, division = refs
    api.create_workload_assignment(
        {
            "facultyId": faculty["id"],
            "subjectId": subject["id"],
            "divisionId": division["id"],
            "type": "lecture",
            "hoursPerWeek": 4,
        }
    )
    api.create_timetable_slot(
        {
            "divisionId": division["id"],
            "facultyId": faculty["id"],
            "subjectId": subject["id"],
            "dayOfWeek": "Monday",
            "startTime": "09:00",
            "endTime": "10:00",
            "classroom": "CS-101",
            "type": "lecture",
        }
    )
    assert api.list_workload_assignments()[0]["faculty"]["name"] == "Dr. A"
    assert api.list_timetable()[0]["subject"]["name"] == "Algorithms"

    api.update_faculty(faculty["id"], {"name": "Renamed"})
    assert api.list_workload_assignments()[0]["faculty"]["name"] == "Renamed"

    api.update_subject(subject["id"], {"name": "Advanced Algorithms"})
    assert api.list_timetable()[0]["subject"]["name"] == "Advanced Algorithms"

    api.update_division(division["id"], {"name": "CE Alpha"})
    assert api.list_workload_assignments()[0]["division"]["name"] == "CE Alpha"
    assert api.list_timetable()[0]["division"]["name"] == "CE Alpha"


def test_errors_raise_api_error(api):
    with pytest.raises(ApiError) as excinfo:
        api.create_faculty({**FACULTY, "email": "broken"})
    assert excinfo.value.status_code == 400
    assert excinfo.value.message == "Invalid data"
    assert excinfo.value.errors[0]["field"] == "email"

    with pytest.raises(ApiError) as excinfo:
        api.get_faculty(12345)
    assert excinfo.value.status_code == 404
    assert excinfo.value.message == "Faculty not found"


def test_login_attaches_bearer_token(anon_client):
    api = CollegeApiClient(anon_client)
    with pytest.raises(ApiError) as excinfo:
        api.login("0000")
    assert excinfo.value.status_code == 401

    api.login("2468")
    anon_client.cookies.clear()
    assert api.dashboard_stats()["totalFaculty"] == 0


def test_upload_soft_delete_refreshes_list(api):
    upload = api.create_excel_upload("1_roster.xlsx", "roster.xlsx", 1024)
    assert [u["id"] for u in api.list_excel_uploads()] == [upload["id"]]

    api.delete_excel_upload(upload["id"])
    assert api.list_excel_uploads() == []
    assert [u["status"] for u in api.list_excel_uploads(include_deleted=True)] == ["deleted"]
