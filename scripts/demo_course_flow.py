"""Demo: walk a learner through the demo course using FastAPI TestClient.

Run with:
    python scripts/demo_course_flow.py
"""

from __future__ import annotations

import asyncio

from fastapi.testclient import TestClient

from progress_service.main import app
from progress_service.repos.repositories import repositories
from progress_service.services import token_service
from progress_service.services.catalog import (
    DEMO_COURSE_ID,
    DEMO_LEARNER_ID,
    seed_demo_catalog,
)
from progress_service.services.task_queue import CERTIFICATE_ISSUANCE
from progress_service.worker import process_one


def main() -> None:
    asyncio.run(seed_demo_catalog(repositories))
    client = TestClient(app)
    token = token_service.create_access_token(sub=DEMO_LEARNER_ID)
    auth = {"Authorization": f"Bearer {token}"}

    # ── Step 1: enroll ──────────────────────────────────────────────
    r = client.post("/v1/enroll", json={"courseId": DEMO_COURSE_ID}, headers=auth)
    print(f"1. POST /v1/enroll                  → {r.status_code}  {r.json()['message']}")

    # ── Step 2: enroll again (idempotent) ───────────────────────────
    r = client.post("/v1/enroll", json={"courseId": DEMO_COURSE_ID}, headers=auth)
    print(f"2. POST /v1/enroll (again)          → {r.status_code}  {r.json()['message']}")

    # ── Step 3: lesson 2 is locked until lesson 1 is done ───────────
    access = f"/v1/progress/courses/{DEMO_COURSE_ID}/lessons/intro-python-2/access"
    r = client.get(access, headers=auth)
    print(f"3. GET  lesson 2 access             → unlocked={r.json()['unlocked']}")

    r = client.post(
        "/v1/progress/complete-lesson",
        json={"courseId": DEMO_COURSE_ID, "lessonId": "intro-python-1"},
        headers=auth,
    )
    print(f"4. POST complete lesson 1           → {r.status_code}  {r.json()['message']}")

    # ── Step 5: fail, then pass, the quiz ───────────────────────────
    for answers in ({"q1": "false", "q2": "a"}, {"q1": "true", "q2": "b"}):
        r = client.post(
            "/v1/progress/submit-quiz",
            json={
                "courseId": DEMO_COURSE_ID,
                "quizId": "intro-python-quiz",
                "answers": answers,
            },
            headers=auth,
        )
        body = r.json()
        print(
            f"5. POST submit quiz                 → score={body['score']} "
            f"passed={body['passed']}  {body['message']}"
        )

    # ── Step 6: run the worker once, then list certificates ─────────
    asyncio.run(process_one(CERTIFICATE_ISSUANCE, timeout=1))
    r = client.get("/v1/certificates", headers=auth)
    print(f"6. GET  /v1/certificates            → {[c['id'] for c in r.json()]}")

    r = client.get("/v1/progress", headers=auth)
    for entry in r.json()["coursesProgress"]:
        print(
            f"7. GET  /v1/progress                → course={entry['course']} "
            f"completed={entry['completed']} {entry['completionPercentage']}%"
        )


if __name__ == "__main__":
    main()
