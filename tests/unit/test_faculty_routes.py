from __future__ import annotations

from datetime import UTC, datetime, timedelta

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from src.api.deps import get_notification_queue
from src.api.main import app
from src.core.auth import Role
from src.domain.services import NotificationFanout
from src.infrastructure.db.models import UserRole
from src.infrastructure.repositories import SubmissionRepository

from tests.fakes import RecordingDispatcher, RecordingQueue
from tests.utils import auth_headers, seed_users, session_payload

AAT1_PAYLOAD = {
    "courseLink": "https://courses.example.com/algorithms",
    "deadline": "2026-12-01T23:59:00+00:00",
}


class TestAssessmentRoutes:
    async def test_create_aat1_returns_camel_case_record(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/faculty/aat1",
            json={**AAT1_PAYLOAD, "facultyId": "forged"},
            headers=auth_headers("faculty-7"),
        )

        assert response.status_code == 201
        body = response.json()
        assert body["facultyId"] == "faculty-7"
        assert body["courseLink"] == AAT1_PAYLOAD["courseLink"]
        assert body["id"]

        fetched = await async_client.get(
            f"/faculty/aat1/{body['id']}", headers=auth_headers("faculty-7")
        )
        assert fetched.status_code == 200
        assert fetched.json()["courseLink"] == AAT1_PAYLOAD["courseLink"]

    async def test_create_aat2_and_list(self, async_client: AsyncClient) -> None:
        payload = {
            "title": "Complexity quiz",
            "questions": [{"prompt": "Big-O of binary search?", "answer": "log n"}],
            "startTime": "2026-11-10T10:00:00+00:00",
            "endTime": "2026-11-10T11:00:00+00:00",
            "duration": 45,
        }

        created = await async_client.post("/faculty/aat2", json=payload, headers=auth_headers())
        listed = await async_client.get("/faculty/aat2", headers=auth_headers())

        assert created.status_code == 201
        assert created.json()["questions"] == payload["questions"]
        assert [item["id"] for item in listed.json()] == [created.json()["id"]]

    async def test_missing_token_is_401(self, async_client: AsyncClient) -> None:
        response = await async_client.post("/faculty/aat1", json=AAT1_PAYLOAD)

        assert response.status_code == 401
        assert response.headers["X-Error-Kind"] == "unauthenticated"

    async def test_garbage_token_is_401(self, async_client: AsyncClient) -> None:
        response = await async_client.get(
            "/faculty/aat1", headers={"Authorization": "Bearer not-a-jwt"}
        )

        assert response.status_code == 401

    async def test_student_is_403_and_nothing_is_written(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/faculty/aat1",
            json=AAT1_PAYLOAD,
            headers=auth_headers("student-1", role=Role.STUDENT),
        )
        listed = await async_client.get("/faculty/aat1", headers=auth_headers())

        assert response.status_code == 403
        assert response.headers["X-Error-Kind"] == "forbidden"
        assert listed.json() == []

    async def test_invalid_payload_is_422(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/faculty/aat1",
            json={"courseLink": "not a url", "deadline": AAT1_PAYLOAD["deadline"]},
            headers=auth_headers(),
        )

        assert response.status_code == 422

    async def test_unknown_assessment_is_404(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/faculty/aat2/missing", headers=auth_headers())

        assert response.status_code == 404
        assert response.headers["X-Error-Kind"] == "not_found"


class TestRemedialSessionRoutes:
    async def test_create_notifies_resolvable_students(
        self,
        async_client: AsyncClient,
        session_factory: async_sessionmaker[AsyncSession],
        fanout: NotificationFanout,
        dispatcher: RecordingDispatcher,
    ) -> None:
        await seed_users(
            session_factory,
            [("student-1", "Ada", UserRole.STUDENT), ("student-2", "Brian", UserRole.STUDENT)],
        )

        response = await async_client.post(
            "/faculty/remedial-sessions",
            json=session_payload(students=["student-1", "student-2", "ghost"]),
            headers=auth_headers(),
        )
        await fanout.drain()

        assert response.status_code == 201
        body = response.json()
        assert body["students"] == ["student-1", "student-2", "ghost"]
        assert body["facultyId"] == "faculty-1"
        assert sorted(call[0] for call in dispatcher.calls) == [
            "student-1@example.edu",
            "student-2@example.edu",
        ]
        assert fanout.reports[-1].reference == body["id"]

    async def test_delivery_failure_still_returns_201(
        self,
        async_client: AsyncClient,
        session_factory: async_sessionmaker[AsyncSession],
        fanout: NotificationFanout,
        dispatcher: RecordingDispatcher,
    ) -> None:
        await seed_users(session_factory, [("student-1", "Ada", UserRole.STUDENT)])
        dispatcher.failing.add("student-1@example.edu")

        response = await async_client.post(
            "/faculty/remedial-sessions",
            json=session_payload(students=["student-1"]),
            headers=auth_headers(),
        )
        await fanout.drain()

        assert response.status_code == 201
        assert fanout.reports[-1].failed_count == 1

        fetched = await async_client.get(
            f"/faculty/remedial-sessions/{response.json()['id']}", headers=auth_headers()
        )
        assert fetched.status_code == 200
        assert fetched.json()["title"] == "Recursion clinic"

    async def test_queue_failure_still_returns_201(
        self,
        async_client: AsyncClient,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        await seed_users(session_factory, [("student-1", "Ada", UserRole.STUDENT)])
        app.dependency_overrides[get_notification_queue] = lambda: RecordingQueue(
            error=ConnectionError("redis unavailable")
        )

        response = await async_client.post(
            "/faculty/remedial-sessions",
            json=session_payload(students=["student-1"]),
            headers=auth_headers(),
        )
        listed = await async_client.get("/faculty/remedial-sessions", headers=auth_headers())

        assert response.status_code == 201
        assert [item["id"] for item in listed.json()] == [response.json()["id"]]

    async def test_empty_invite_list_sends_nothing(
        self,
        async_client: AsyncClient,
        fanout: NotificationFanout,
        dispatcher: RecordingDispatcher,
    ) -> None:
        response = await async_client.post(
            "/faculty/remedial-sessions", json=session_payload(), headers=auth_headers()
        )
        await fanout.drain()

        assert response.status_code == 201
        assert dispatcher.calls == []
        assert fanout.pending == 0

    async def test_end_before_start_is_422(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/faculty/remedial-sessions",
            json=session_payload(endTime="2026-11-02T08:00:00+00:00"),
            headers=auth_headers(),
        )
        listed = await async_client.get("/faculty/remedial-sessions", headers=auth_headers())

        assert response.status_code == 422
        assert listed.json() == []


class TestStudentsAndSubmissions:
    async def test_list_students_hides_credentials(
        self,
        async_client: AsyncClient,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        await seed_users(
            session_factory,
            [("student-1", "Ada", UserRole.STUDENT), ("faculty-1", "Grace", UserRole.FACULTY)],
        )

        response = await async_client.get("/faculty/students", headers=auth_headers())

        assert response.status_code == 200
        assert response.json() == [
            {"id": "student-1", "name": "Ada", "email": "student-1@example.edu", "role": "student"}
        ]

    async def test_submissions_and_regrading(
        self,
        async_client: AsyncClient,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        await seed_users(session_factory, [("student-1", "Ada", UserRole.STUDENT)])
        base = datetime(2026, 11, 1, 12, tzinfo=UTC)
        async with session_factory() as session:
            repo = SubmissionRepository(session)
            first = await repo.create(
                student_id="student-1",
                aat1_id="aat1-gone",
                certificate="https://certs.example.com/1.pdf",
                created_at=base,
            )
            second = await repo.create(
                student_id="student-1",
                aat1_id="aat1-gone",
                certificate="https://certs.example.com/2.pdf",
                created_at=base + timedelta(minutes=5),
            )

        listed = await async_client.get("/faculty/aat1/submissions", headers=auth_headers())
        assert listed.status_code == 200
        rows = listed.json()
        assert [row["id"] for row in rows] == [second.id, first.id]
        assert rows[0]["studentName"] == "Ada"
        assert rows[0]["courseTitle"] == "Unknown"

        graded = await async_client.put(
            f"/faculty/aat1/submissions/{first.id}/grade",
            json={"grade": "A"},
            headers=auth_headers(),
        )
        regraded = await async_client.put(
            f"/faculty/aat1/submissions/{first.id}/grade",
            json={"grade": "B"},
            headers=auth_headers(),
        )

        assert graded.status_code == 200
        assert regraded.json()["message"] == "Grade updated successfully"
        assert regraded.json()["grade"] == "B"
        after = await async_client.get("/faculty/aat1/submissions", headers=auth_headers())
        assert {row["id"]: row["grade"] for row in after.json()} == {
            second.id: None,
            first.id: "B",
        }

    async def test_grading_unknown_submission_is_404(self, async_client: AsyncClient) -> None:
        response = await async_client.put(
            "/faculty/aat1/submissions/missing/grade",
            json={"grade": "A"},
            headers=auth_headers(),
        )
        listed = await async_client.get("/faculty/aat1/submissions", headers=auth_headers())

        assert response.status_code == 404
        assert response.json()["detail"] == "Submission not found"
        assert listed.json() == []

    async def test_boolean_grade_is_422(
        self,
        async_client: AsyncClient,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        async with session_factory() as session:
            submission = await SubmissionRepository(session).create(
                student_id="student-1",
                aat1_id="aat1-1",
                certificate="https://certs.example.com/1.pdf",
            )

        response = await async_client.put(
            f"/faculty/aat1/submissions/{submission.id}/grade",
            json={"grade": True},
            headers=auth_headers(),
        )
        listed = await async_client.get("/faculty/aat1/submissions", headers=auth_headers())

        assert response.status_code == 422
        assert listed.json()[0]["grade"] is None
