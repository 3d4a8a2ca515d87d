from __future__ import annotations

import asyncio

from fastapi.testclient import TestClient

from progress_service.repos.repositories import repositories
from tests.conftest import auth_headers, seed_course, seed_learner


def test_enroll_success(client: TestClient) -> None:
    seed_learner("test-user")
    seed_course()

    resp = client.post("/v1/enroll", json={"courseId": "CS101"}, headers=auth_headers())

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "message": "Successfully enrolled in course."}


def test_enroll_twice_still_succeeds(client: TestClient) -> None:
    seed_learner("test-user")
    seed_course()

    client.post("/v1/enroll", json={"courseId": "CS101"}, headers=auth_headers())
    resp = client.post("/v1/enroll", json={"courseId": "CS101"}, headers=auth_headers())

    assert resp.status_code == 200
    assert resp.json()["message"] == "You are already enrolled in this course."


def test_enroll_missing_course_id_is_400(client: TestClient) -> None:
    seed_learner("test-user")

    resp = client.post("/v1/enroll", json={}, headers=auth_headers())

    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "Course ID is required."}


def test_group_enroll_without_company_name_is_400(client: TestClient) -> None:
    seed_learner("test-user")
    seed_course()

    resp = client.post(
        "/v1/enroll", json={"courseId": "CS101", "isGroup": True}, headers=auth_headers()
    )

    assert resp.status_code == 400


def test_enroll_unknown_course_is_404(client: TestClient) -> None:
    seed_learner("test-user")

    resp = client.post("/v1/enroll", json={"courseId": "nope"}, headers=auth_headers())

    assert resp.status_code == 404
    assert resp.json()["message"] == "Course not found."


def test_group_enroll_with_company_name(client: TestClient) -> None:
    seed_learner("test-user")
    seed_course()

    resp = client.post(
        "/v1/enroll",
        json={"courseId": "CS101", "isGroup": True, "companyName": "Acme", "isLeader": True},
        headers=auth_headers(),
    )

    assert resp.status_code == 200
    group = asyncio.run(repositories.groups.find_one("title", "Acme"))
    assert group is not None
    assert group.leaders == {"test-user"}


def test_enroll_for_another_user_requires_admin(client: TestClient) -> None:
    seed_learner("test-user")
    seed_learner("U2")
    seed_course()

    resp = client.post(
        "/v1/enroll", json={"courseId": "CS101", "userId": "U2"}, headers=auth_headers()
    )
    assert resp.status_code == 403

    resp = client.post(
        "/v1/enroll",
        json={"courseId": "CS101", "userId": "U2"},
        headers=auth_headers("test-admin", ["admin"]),
    )
    assert resp.status_code == 200
    course = asyncio.run(repositories.courses.require("CS101"))
    assert course.enrolled_students == {"U2"}


def test_malformed_body_uses_error_envelope(client: TestClient) -> None:
    resp = client.post(
        "/v1/enroll",
        content=b"{not json",
        headers={**auth_headers(), "Content-Type": "application/json"},
    )
    assert resp.status_code == 400
    assert resp.json()["success"] is False
