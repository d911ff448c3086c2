"""
Test the timetable API with self-contained test data.
"""
from conftest import build_schedule
from models.schemas import TimeSlot


API = "/api/v1"


# Test data fixtures
def get_schedule_document(schedule_id="cse-3", class_name="CSE", semester="3", time_slots=None):
    """Return a stored schedule document as the editor would send it."""
    return build_schedule(schedule_id, class_name, semester, time_slots).model_dump(by_alias=True)


def get_create_request(level=None):
    """Return wizard output for a new schedule without periods."""
    details = {"className": "ECE", "section": "B", "session": "2025-26", "semester": "5"}
    if level:
        details["level"] = level
    return {
        "details": details,
        "subjects": [
            {"id": "dsp", "name": "Signal Processing", "code": "EC501", "theoryCount": 4, "practicalCount": 2}
        ],
        "faculties": [
            {"id": "f9", "name": "Dana Rao"}
        ],
    }


def load(client, *documents):
    for document in documents:
        response = client.put(f"{API}/schedules/{document['id']}", json=document)
        assert response.status_code == 200, response.json()


def test_root_endpoint(client):
    """Test root endpoint returns service info."""
    response = client.get("/")
    assert response.status_code == 200

    data = response.json()
    assert "service" in data
    assert data["status"] == "healthy"


def test_health_endpoint(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


# ============================================
# Schedules
# ============================================

def test_create_schedule_uses_preset_periods(client):
    response = client.post(f"{API}/schedules", json=get_create_request())
    assert response.status_code == 201, response.json()

    data = response.json()
    assert data["details"]["level"] == "higher-year"
    assert len(data["periods"]) == 7
    assert data["periods"][0]["time"] == "10:30 AM - 11:30 AM"
    assert data["periods"][3]["isBreak"] is True
    assert data["subjects"][0]["theoryCount"] == 4
    assert data["faculties"][0]["initials"] == "DR"

    listed = client.get(f"{API}/schedules").json()
    assert [s["id"] for s in listed] == [data["id"]]


def test_put_and_get_schedule(client):
    load(client, get_schedule_document())

    response = client.get(f"{API}/schedules/cse-3")
    assert response.status_code == 200

    data = response.json()
    assert data["details"]["className"] == "CSE"
    assert [p["id"] for p in data["periods"]] == [1, 2, 3, 4, 5]
    assert "timeSlots" in data
    assert "lastModified" in data


def test_delete_schedule(client):
    load(client, get_schedule_document())

    response = client.delete(f"{API}/schedules/cse-3")
    assert response.status_code == 204

    response = client.get(f"{API}/schedules/cse-3")
    assert response.status_code == 404


def test_put_schedule_rejects_broken_period_table(client):
    document = get_schedule_document()
    document["periods"][1]["id"] = 1

    response = client.put(f"{API}/schedules/cse-3", json=document)
    assert response.status_code == 422

    data = response.json()
    assert data["errors"]["Request"] == ["Duplicate period id 1"]
    assert client.get(f"{API}/schedules/cse-3").status_code == 404


def test_put_schedule_rejects_out_of_order_periods(client):
    document = get_schedule_document()
    document["periods"][0], document["periods"][1] = document["periods"][1], document["periods"][0]

    response = client.put(f"{API}/schedules/cse-3", json=document)
    assert response.status_code == 422
    assert "starts before" in response.json()["errors"]["Request"][0]


def test_put_schedule_rejects_two_sessions_in_one_cell(client):
    slots = [
        TimeSlot(id="x", day="Mon", period=1, subject_id="math", faculty_ids=["f1"]),
        TimeSlot(id="y", day="Tue", period=1, subject_id="phy", faculty_ids=["f2"]),
    ]
    document = get_schedule_document(time_slots=slots)
    document["timeSlots"][1]["day"] = "Mon"

    response = client.put(f"{API}/schedules/cse-3", json=document)
    assert response.status_code == 422
    assert response.json()["errors"]["Request"] == ["More than one session starts at Mon period 1"]


def test_create_schedule_rejects_reserved_period_id(client):
    request = get_create_request()
    request["periods"] = [{"id": 0, "label": "Hour 1", "startMinutes": 480, "endMinutes": 540}]

    response = client.post(f"{API}/schedules", json=request)
    assert response.status_code == 422
    assert "reserved id 0" in response.json()["errors"]["Request"][0]


def test_unknown_schedule_returns_404(client):
    response = client.get(f"{API}/schedules/nope")
    assert response.status_code == 404

    data = response.json()
    assert data["code"] == "UNKNOWN_SCHEDULE"
    assert "nope" in data["message"]


# ============================================
# Sessions
# ============================================

def test_place_session(client):
    load(client, get_schedule_document())

    response = client.post(f"{API}/schedules/cse-3/sessions", json={
        "day": "Mon",
        "period": 4,
        "subjectId": "phy",
        "facultyIds": ["f2"],
        "type": "Practical",
        "duration": 2,
    })
    assert response.status_code == 200, response.json()

    data = response.json()
    assert data["coveredPeriods"] == [4, 5]
    assert data["session"]["duration"] == 2
    assert data["usage"]["usedPractical"] == 2
    assert data["usage"]["isPracticalFull"] is True
    assert data["conflicts"] == []
    assert data["messages"]["error_message"] == []

    cell = client.get(f"{API}/schedules/cse-3/cells/Mon/5").json()
    assert cell["session"]["id"] == data["session"]["id"]
    assert cell["isStart"] is False


def test_place_session_across_break_is_rejected(client):
    load(client, get_schedule_document())

    response = client.post(f"{API}/schedules/cse-3/sessions", json={
        "day": "Mon", "period": 2, "subjectId": "phy", "facultyIds": ["f2"], "type": "Practical", "duration": 2,
    })
    assert response.status_code == 422

    data = response.json()
    assert data["code"] == "INVALID_SPAN"
    assert data["details"]["break"] == 3

    # nothing was stored
    assert client.get(f"{API}/schedules/cse-3").json()["timeSlots"] == []


def test_place_session_without_faculty(client):
    load(client, get_schedule_document())

    response = client.post(f"{API}/schedules/cse-3/sessions", json={"day": "Mon", "period": 1, "subjectId": "math"})
    assert response.status_code == 422
    assert response.json()["code"] == "EMPTY_ASSIGNMENT"


def test_place_session_unknown_period(client):
    load(client, get_schedule_document())

    response = client.post(f"{API}/schedules/cse-3/sessions", json={
        "day": "Mon", "period": 99, "subjectId": "math", "facultyIds": ["f1"],
    })
    assert response.status_code == 404
    assert response.json()["code"] == "UNKNOWN_PERIOD"


def test_place_session_reports_conflict(client):
    busy = TimeSlot(id="s1", day="Wed", period=1, subject_id="math", faculty_ids=["f1"])
    load(
        client,
        get_schedule_document(time_slots=[busy]),
        get_schedule_document("ece-5", class_name="ECE", semester="5"),
    )

    response = client.post(f"{API}/schedules/ece-5/sessions", json={
        "day": "Wed", "period": 1, "subjectId": "phy", "facultyIds": ["f1"],
    })
    assert response.status_code == 200

    data = response.json()
    assert data["conflicts"][0]["scheduleId"] == "cse-3"
    assert data["conflicts"][0]["label"] == "CSE | Sem 3"
    assert data["messages"]["error_message"][0]["title"] == "Faculty Conflict"


def test_delete_session(client):
    slot = TimeSlot(id="s1", day="Fri", period=1, subject_id="math", faculty_ids=["f1"])
    load(client, get_schedule_document(time_slots=[slot]))

    response = client.delete(f"{API}/schedules/cse-3/sessions/Fri/1")
    assert response.status_code == 200
    assert response.json()["id"] == "s1"

    response = client.delete(f"{API}/schedules/cse-3/sessions/Fri/1")
    assert response.status_code == 200
    assert response.json() is None


def test_subject_usage(client):
    slots = [
        TimeSlot(id="a", day="Mon", period=1, subject_id="math", faculty_ids=["f1"]),
        TimeSlot(id="b", day="Tue", period=1, subject_id="math", faculty_ids=["f1"]),
    ]
    load(client, get_schedule_document(time_slots=slots))

    data = client.get(f"{API}/schedules/cse-3/subjects/math/usage").json()
    assert data["usedTheory"] == 2
    assert data["theoryRemaining"] == 1

    data = client.get(
        f"{API}/schedules/cse-3/subjects/math/usage", params={"excludeSessionId": "a"}
    ).json()
    assert data["usedTheory"] == 1

    response = client.get(f"{API}/schedules/cse-3/subjects/chem/usage")
    assert response.status_code == 404
    assert response.json()["code"] == "UNKNOWN_SUBJECT"


# ============================================
# Periods
# ============================================

def test_add_period(client):
    load(client, get_schedule_document(), get_schedule_document("ece-5", class_name="ECE"))

    response = client.post(f"{API}/periods", json={"label": "Hour 5", "startTime": "12:30", "endTime": "1:30 PM"})
    assert response.status_code == 201, response.json()

    data = response.json()
    assert data["period"]["id"] == 6
    assert data["period"]["time"] == "12:30 PM - 1:30 PM"
    assert data["period"]["durationLabel"] == "1h"
    for sch in client.get(f"{API}/schedules").json():
        assert sch["periods"][-1]["id"] == 6


def test_add_period_without_schedules(client):
    response = client.post(f"{API}/periods", json={"label": "Hour 1", "startTime": "8:00", "endTime": "9:00"})
    assert response.status_code == 422
    assert response.json()["code"] == "INVALID_PERIOD"


def test_add_period_bad_time(client):
    load(client, get_schedule_document())

    response = client.post(f"{API}/periods", json={"label": "Late", "startTime": "25:00", "endTime": "26:00"})
    assert response.status_code == 422
    assert response.json()["code"] == "INVALID_PERIOD"


def test_update_period_for_one_schedule(client):
    load(client, get_schedule_document(), get_schedule_document("ece-5", class_name="ECE"))

    response = client.patch(
        f"{API}/periods/1", params={"scheduleId": "ece-5"}, json={"label": "Assembly", "endTime": "8:45"}
    )
    assert response.status_code == 200, response.json()
    assert response.json()["period"]["endMinutes"] == 525

    assert client.get(f"{API}/schedules/ece-5").json()["periods"][0]["label"] == "Assembly"
    assert client.get(f"{API}/schedules/cse-3").json()["periods"][0]["label"] == "Hour 1"


def test_delete_period_cascades(client):
    slot = TimeSlot(id="s1", day="Mon", period=4, subject_id="math", faculty_ids=["f1"])
    load(client, get_schedule_document(time_slots=[slot]))

    response = client.delete(f"{API}/periods/4")
    assert response.status_code == 200

    removed = response.json()["removedSessions"]
    assert [r["session"]["id"] for r in removed] == ["s1"]
    assert client.get(f"{API}/schedules/cse-3").json()["timeSlots"] == []

    response = client.delete(f"{API}/periods/4")
    assert response.status_code == 404


# ============================================
# Queries
# ============================================

def test_conflict_lookup(client):
    slot = TimeSlot(id="s1", day="Thu", period=4, subject_id="phy", faculty_ids=["f3"], type="Practical", duration=2)
    load(client, get_schedule_document(time_slots=[slot]), get_schedule_document("ece-5", class_name="ECE"))

    params = {"day": "Thu", "periodId": 5, "facultyId": "f3", "exceptScheduleId": "ece-5"}
    response = client.get(f"{API}/conflicts", params=params)
    assert response.status_code == 200

    data = response.json()
    assert data["scheduleId"] == "cse-3"
    assert data["subjectName"] == "Physics"
    assert data["type"] == "Practical"

    params["exceptScheduleId"] = "cse-3"
    assert client.get(f"{API}/conflicts", params=params).json() is None


def test_color_endpoint(client):
    response = client.get(f"{API}/colors", params={"subjectId": "subj1", "facultyIds": ["facA"]})
    assert response.status_code == 200
    assert response.json() == {"color": "sky"}


def test_faculty_timetable(client):
    slots = [
        TimeSlot(id="a", day="Tue", period=1, subject_id="math", faculty_ids=["f1"]),
        TimeSlot(id="b", day="Mon", period=4, subject_id="phy", faculty_ids=["f1", "f2"], type="Practical", duration=2),
    ]
    load(client, get_schedule_document(time_slots=slots))

    response = client.get(f"{API}/faculties/f1/timetable")
    assert response.status_code == 200

    data = response.json()
    assert data["faculty"]["initials"] == "AS"
    assert data["load"] == 3
    assert [e["session"]["id"] for e in data["entries"]] == ["b", "a"]

    response = client.get(f"{API}/faculties/ghost/timetable")
    assert response.status_code == 404


def test_validation_error_format(client):
    """Test that validation errors return human-friendly format."""
    load(client, get_schedule_document())

    response = client.post(f"{API}/schedules/cse-3/sessions", json={"day": "Sun", "facultyIds": ["f1"]})
    assert response.status_code == 422

    data = response.json()
    assert "errors" in data
    assert isinstance(data["errors"], dict)
    assert "Day" in data["errors"]
    assert data["errors"]["Period"] == ["Period is required."]
    assert "Faculties" not in data["errors"]


def test_validation_error_uses_editor_labels(client):
    load(client, get_schedule_document())

    response = client.post(f"{API}/schedules/cse-3/sessions", json={
        "day": "Mon", "period": 1, "subjectId": "math", "facultyIds": "f1", "duration": 0,
    })
    assert response.status_code == 422

    errors = response.json()["errors"]
    assert errors["Faculties"][0].startswith("Faculties: ")
    assert errors["Duration"][0].startswith("Duration is out of range")
    for field, messages in errors.items():
        assert isinstance(messages, list)
        assert len(messages) > 0
