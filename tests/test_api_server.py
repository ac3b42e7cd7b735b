import pytest
from fastapi.testclient import TestClient

from eduportal.constants.auth_constants import USER_ID_HEADER
from eduportal.server.api_server import create_api_app

ADMIN = {USER_ID_HEADER: "1"}
TEACHER = {USER_ID_HEADER: "2"}
STUDENT = {USER_ID_HEADER: "3"}
OTHER_STUDENT = {USER_ID_HEADER: "4"}

NEW_QUIZ = {
    "title": "Letters",
    "questions": [
        {"question_text": "First?", "options": ["A", "B"], "correct_answer": "A"},
        {"question_text": "Last?", "options": ["X", "Y"], "correct_answer": "Y"},
    ],
}


@pytest.fixture
def client(manager):
    manager.seed_demo_data()
    return TestClient(create_api_app(manager))


def test_unknown_caller_is_rejected(client):
    assert client.get("/quizzes").status_code == 401
    assert client.get("/quizzes", headers={USER_ID_HEADER: "99"}).status_code == 401
    assert client.get("/health").json() == {"status": "ok"}


def test_teacher_creates_quiz_and_student_submits(client):
    created = client.post("/quizzes", json=NEW_QUIZ, headers=TEACHER)
    assert created.status_code == 201
    quiz = created.json()
    assert quiz["created_by"] == "2"
    assert [q["id"] for q in quiz["questions"]] == ["1", "2"]

    response = client.post(
        f"/quizzes/{quiz['id']}/submissions",
        json={"answers": {"1": "A", "2": "X"}},
        headers=STUDENT,
    )
    assert response.status_code == 201
    body = response.json()
    assert body["score"] == 50
    assert body["passed"] is False
    assert body["student_id"] == "3"


def test_students_do_not_see_answer_key(client):
    quiz = client.get("/quizzes/1", headers=STUDENT).json()
    assert all("correct_answer" not in q for q in quiz["questions"])
    quiz = client.get("/quizzes/1", headers=TEACHER).json()
    assert quiz["questions"][0]["correct_answer"] == "var x = 5;"


def test_empty_quiz_is_unprocessable(client):
    response = client.post("/quizzes", json={"title": "Empty", "questions": []}, headers=ADMIN)
    assert response.status_code == 422
    assert "at least one question" in response.json()["detail"]


def test_role_gating(client):
    assert client.post("/quizzes", json=NEW_QUIZ, headers=STUDENT).status_code == 403
    assert client.post("/quizzes/1/submissions", json={"answers": {}}, headers=TEACHER).status_code == 403
    assert client.get("/users", headers=TEACHER).status_code == 403
    assert client.get("/students/3/stats", headers=OTHER_STUDENT).status_code == 403


def test_only_author_or_admin_edits_quiz(client):
    client.post("/users", json={"username": "teacher2", "role": "teacher"}, headers=ADMIN)
    other_teacher = {USER_ID_HEADER: "5"}

    assert client.patch("/quizzes/1", json={"title": "Mine now"}, headers=other_teacher).status_code == 403
    response = client.patch("/quizzes/1", json={"title": "JS Basics"}, headers=TEACHER)
    assert response.status_code == 200
    assert response.json()["title"] == "JS Basics"
    assert client.delete("/quizzes/1", headers=ADMIN).status_code == 204
    assert client.get("/quizzes/1", headers=ADMIN).status_code == 404


def test_teacher_sees_only_own_quizzes(client):
    client.post("/users", json={"username": "teacher2", "role": "teacher"}, headers=ADMIN)
    assert client.get("/quizzes", headers={USER_ID_HEADER: "5"}).json() == []
    assert len(client.get("/quizzes", headers=TEACHER).json()) == 2


def test_submit_to_missing_quiz(client):
    response = client.post("/quizzes/404/submissions", json={"answers": {}}, headers=STUDENT)
    assert response.status_code == 404


def test_student_statistics(client):
    client.post("/quizzes/2/submissions", json={"answers": {}}, headers=STUDENT)

    stats = client.get("/students/3/stats", headers=STUDENT).json()
    assert stats == {"student_id": "3", "completed_quizzes": 2, "average_score": 50, "passed_quizzes": 1}

    status = client.get("/students/3/quizzes/2/status", headers=STUDENT).json()
    assert status["status"] == 0
    assert status["passed"] is False

    status = client.get("/students/4/quizzes/2/status", headers=TEACHER).json()
    assert status["status"] == "not attempted"
    assert status["completed"] is False


def test_submissions_listing_by_role(client):
    client.post("/quizzes/1/submissions", json={"answers": {}}, headers=OTHER_STUDENT)
    assert len(client.get("/submissions", headers=ADMIN).json()) == 2
    assert len(client.get("/submissions", headers=TEACHER).json()) == 2
    mine = client.get("/submissions", headers=OTHER_STUDENT).json()
    assert [s["student_id"] for s in mine] == ["4"]


def test_quiz_and_author_statistics(client):
    client.post("/quizzes/1/submissions", json={"answers": {"1": "var x = 5;"}}, headers=OTHER_STUDENT)

    quiz_stats = client.get("/quizzes/1/stats", headers=TEACHER).json()
    assert quiz_stats["attempts"] == 2
    assert quiz_stats["average_score"] == 75

    author_stats = client.get("/authors/2/stats", headers=TEACHER).json()
    assert author_stats["quiz_count"] == 2
    assert author_stats["submission_count"] == 2
    assert client.get("/authors/1/stats", headers=TEACHER).status_code == 403


def test_admin_overview_and_user_management(client):
    overview = client.get("/overview", headers=ADMIN).json()
    assert overview["users"] == {"admin": 1, "teacher": 1, "student": 2}
    assert overview["submissions"] == 1

    bad_role = client.post("/users", json={"username": "x", "role": "janitor"}, headers=ADMIN)
    assert bad_role.status_code == 422
    updated = client.patch("/users/4", json={"course": "Physics"}, headers=ADMIN)
    assert updated.json()["course"] == "Physics"
    assert client.delete("/users/4", headers=ADMIN).status_code == 204
    assert client.delete("/users/4", headers=ADMIN).status_code == 404


def test_video_management(client):
    created = client.post("/videos", json={"title": "Loops", "video_url": "https://example.com/loops"}, headers=TEACHER)
    assert created.status_code == 201
    video_id = created.json()["id"]

    assert client.patch(f"/videos/{video_id}", json={"title": "x"}, headers=STUDENT).status_code == 403
    assert client.patch(f"/videos/{video_id}", json={"title": ""}, headers=TEACHER).status_code == 422
    assert len(client.get("/videos", headers=TEACHER).json()) == 3
    assert client.delete(f"/videos/{video_id}", headers=TEACHER).status_code == 204


def test_user_listing_filters_by_role(client):
    students = client.get("/users", params={"role": "student"}, headers=ADMIN).json()
    assert [user["username"] for user in students] == ["student1", "student2"]
    assert client.get("/users", params={"role": "janitor"}, headers=ADMIN).status_code == 422


def test_caller_header_coexists_with_user_id_path(manager):
    manager.seed_demo_data()
    app = create_api_app(manager)
    paths = {route.path for route in app.routes}
    assert "/users/{user_id}" in paths

    client = TestClient(app)
    response = client.patch("/users/3", json={"name": "Jane S."}, headers=ADMIN)
    assert response.status_code == 200
    assert response.json()["id"] == "3"
    assert client.patch("/users/3", json={"name": "x"}, headers=STUDENT).status_code == 403


def test_delete_routes_send_empty_body(client):
    video_id = client.post("/videos", json={"title": "Temp", "video_url": "https://example.com/t"}, headers=TEACHER).json()["id"]
    client.post("/users", json={"username": "temp", "role": "student"}, headers=ADMIN)

    for path, headers in [
        (f"/videos/{video_id}", TEACHER),
        ("/users/5", ADMIN),
        ("/quizzes/2", TEACHER),
    ]:
        response = client.delete(path, headers=headers)
        assert response.status_code == 204
        assert response.content == b""
