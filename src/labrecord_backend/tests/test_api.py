"""
API smoke tests through FastAPI's TestClient, backed by the in-memory lab.
"""

import httpx
import pytest
from fastapi.testclient import TestClient

from labrecord_backend.database import get_db
from labrecord_backend.server import app
from labrecord_backend.services.execution import ExecutionClient, get_execution_client
from labrecord_backend.settings import settings


@pytest.fixture
def client(Session, lab):
    def override_get_db():
        db = Session()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def as_user(user_id):
    return {"X-User-Id": user_id}


class TestAuthentication:

    def test_health_is_public(self, client):
        assert client.get("/health").json() == {"status": "ok"}

    def test_missing_identity(self, client):
        assert client.get("/subjects").status_code == 401

    def test_unknown_identity(self, client):
        assert client.get("/subjects", headers=as_user("ghost")).status_code == 401


class TestCrudRoutes:

    def test_list_subjects_with_total(self, client):
        response = client.get("/subjects", headers=as_user("stu1"))

        assert response.status_code == 200
        assert response.headers["X-Total-Count"] == "2"
        assert {s["code"] for s in response.json()} == {"CS101", "CS302"}

    def test_subject_creation_is_admin_only(self, client):
        payload = {"name": "Compiler Design", "code": "CS501", "department": "CSE"}

        assert client.post("/subjects", json=payload, headers=as_user("fac1")).status_code == 404

        response = client.post("/subjects", json=payload, headers=as_user("admin1"))
        assert response.status_code == 201
        assert response.json()["code"] == "CS501"

    def test_assigned_faculty_creates_experiment(self, client, lab):
        payload = {"subject_id": lab.cs101, "title": "Loops", "experiment_number": 2, "due_date": "2026-11-30"}

        response = client.post("/experiments", json=payload, headers=as_user("fac1"))
        assert response.status_code == 201
        assert response.json()["due_date"] == "2026-11-30"

        payload["subject_id"] = lab.cs302
        assert client.post("/experiments", json=payload, headers=as_user("fac1")).status_code == 404

    def test_self_enrollment_and_duplicate(self, client, lab):
        payload = {"student_id": "stu3", "subject_id": lab.cs302}

        assert client.post("/enrollments", json=payload, headers=as_user("stu3")).status_code == 201
        assert client.post("/enrollments", json=payload, headers=as_user("stu3")).status_code == 409

    def test_profile_role_escalation_is_hidden(self, client):
        response = client.patch("/profiles/stu1", json={"role": "admin"}, headers=as_user("stu1"))
        assert response.status_code == 404

        response = client.patch("/profiles/stu1", json={"full_name": "Renamed"}, headers=as_user("stu1"))
        assert response.status_code == 200
        assert response.json()["full_name"] == "Renamed"

    def test_unreadable_row_looks_missing(self, client, lab):
        submission = client.post("/submissions", json={"experiment_id": lab.exp1, "code": "x=1", "language": "python"},
                                 headers=as_user("stu1")).json()

        assert client.get(f"/submissions/{submission['id']}", headers=as_user("stu2")).status_code == 404
        assert client.get(f"/submissions/{submission['id']}", headers=as_user("fac1")).status_code == 200
        assert client.get("/submissions/does-not-exist", headers=as_user("admin1")).status_code == 404


class TestWorkflowRoutes:

    def test_submit_evaluate_flow(self, client, lab):
        response = client.post("/submissions", json={"experiment_id": lab.exp1, "code": "print(1)", "language": "Python"},
                               headers=as_user("stu1"))
        assert response.status_code == 201
        submission = response.json()
        assert submission["status"] == "submitted"

        duplicate = client.post("/submissions", json={"experiment_id": lab.exp1, "code": "print(2)", "language": "python"},
                                headers=as_user("stu1"))
        assert duplicate.status_code == 409

        updated = client.patch(f"/submissions/{submission['id']}", json={"code": "print(2)"}, headers=as_user("stu1"))
        assert updated.status_code == 200
        assert updated.json()["code"] == "print(2)"

        evaluation = client.put(f"/submissions/{submission['id']}/evaluation", json={"marks": 85, "feedback": "Good"},
                                headers=as_user("fac1"))
        assert evaluation.status_code == 200
        assert evaluation.json()["marks"] == 85

        again = client.put(f"/submissions/{submission['id']}/evaluation", json={"marks": 90}, headers=as_user("fac1"))
        assert again.json()["id"] == evaluation.json()["id"]

        status = client.get(f"/submissions/{submission['id']}", headers=as_user("stu1")).json()["status"]
        assert status == "evaluated"

        evaluated = client.get("/submissions", params={"status": "evaluated"}, headers=as_user("fac1"))
        assert [s["id"] for s in evaluated.json()] == [submission["id"]]

        assert client.get("/evaluations", headers=as_user("stu1")).headers["X-Total-Count"] == "1"
        assert client.get("/evaluations", headers=as_user("fac2")).json() == []

        frozen = client.patch(f"/submissions/{submission['id']}", json={"code": "print(3)"}, headers=as_user("stu1"))
        assert frozen.status_code == 422

    def test_save_from_editor(self, client, lab):
        first = client.put(f"/experiments/{lab.exp1}/submission", json={"code": "x=1", "language": "c", "draft": True},
                           headers=as_user("stu1"))
        assert first.status_code == 200
        assert first.json()["status"] == "draft"

        second = client.put(f"/experiments/{lab.exp1}/submission", json={"code": "x=2", "language": "c"},
                            headers=as_user("stu1"))
        assert second.json()["id"] == first.json()["id"]
        assert second.json()["status"] == "submitted"

    @pytest.mark.parametrize("marks", [-1, 101])
    def test_marks_out_of_range(self, client, lab, marks):
        submission = client.post("/submissions", json={"experiment_id": lab.exp1, "code": "x=1", "language": "python"},
                                 headers=as_user("stu1")).json()

        response = client.put(f"/submissions/{submission['id']}/evaluation", json={"marks": marks}, headers=as_user("fac1"))
        assert response.status_code == 422

    def test_unassigned_faculty_cannot_evaluate(self, client, lab):
        submission = client.post("/submissions", json={"experiment_id": lab.exp1, "code": "x=1", "language": "python"},
                                 headers=as_user("stu1")).json()

        response = client.put(f"/submissions/{submission['id']}/evaluation", json={"marks": 50}, headers=as_user("fac2"))
        assert response.status_code == 404


class TestDashboard:

    def test_student_progress(self, client, lab):
        client.post("/submissions", json={"experiment_id": lab.exp1, "code": "x=1", "language": "python"}, headers=as_user("stu1"))

        dashboard = client.get("/dashboard", headers=as_user("stu1")).json()

        assert dashboard["role"] == "student"
        [progress] = dashboard["progress"]
        assert progress["code"] == "CS101"
        assert (progress["total_experiments"], progress["submitted"], progress["progress"]) == (1, 1, 100)

    def test_faculty_reviews(self, client, lab):
        client.post("/submissions", json={"experiment_id": lab.exp1, "code": "x=1", "language": "python"}, headers=as_user("stu1"))
        client.post("/submissions", json={"experiment_id": lab.exp1, "code": "x=2", "language": "python", "draft": True}, headers=as_user("stu2"))

        dashboard = client.get("/dashboard", headers=as_user("fac1")).json()

        [review] = dashboard["reviews"]
        assert (review["total"], review["pending"], review["evaluated"]) == (1, 1, 0)

    def test_admin_overview(self, client):
        overview = client.get("/dashboard", headers=as_user("admin1")).json()["overview"]

        assert overview["subjects"] == 2
        assert overview["students"] == 3
        assert overview["faculty"] == 2


class TestExecutionRoute:

    def test_execute_proxies_to_sandbox(self, client):
        def handler(request):
            return httpx.Response(200, json={"run": {"stdout": "3\n", "output": "3\n", "code": 0}})

        app.dependency_overrides[get_execution_client] = lambda: ExecutionClient(
            url="http://sandbox.test", transport=httpx.MockTransport(handler))

        response = client.post("/execute", json={"code": "print(1+2)", "language": "python"}, headers=as_user("stu1"))

        assert response.status_code == 200
        body = response.json()
        assert body["stdout"] == "3\n"
        assert body["exitCode"] == 0
        assert body["compileError"] == ""

    def test_unsupported_language(self, client):
        response = client.post("/execute", json={"code": "x", "language": "cobol"}, headers=as_user("stu1"))
        assert response.status_code == 422

    def test_sandbox_down(self, client):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        app.dependency_overrides[get_execution_client] = lambda: ExecutionClient(
            url="http://sandbox.test", transport=httpx.MockTransport(handler))

        response = client.post("/execute", json={"code": "print(1)", "language": "python"}, headers=as_user("stu1"))
        assert response.status_code == 502


class TestIdentityHook:

    def test_principal_created(self, client, monkeypatch):
        monkeypatch.setattr(settings, "IDENTITY_WEBHOOK_SECRET", None)

        response = client.post("/hooks/identity/principal-created",
                               json={"id": "new-id", "raw_user_meta_data": {"full_name": "New Student"}})

        assert response.status_code == 201
        assert response.json()["role"] == "student"
        assert client.get("/profiles/new-id", headers=as_user("new-id")).status_code == 200

    def test_secret_is_required_when_configured(self, client, monkeypatch):
        monkeypatch.setattr(settings, "IDENTITY_WEBHOOK_SECRET", "s3cret")

        denied = client.post("/hooks/identity/principal-created", json={"id": "a"})
        assert denied.status_code == 401

        accepted = client.post("/hooks/identity/principal-created", json={"id": "a"},
                               headers={"X-Webhook-Secret": "s3cret"})
        assert accepted.status_code == 201

    def test_production_rejects_without_configured_secret(self, client, monkeypatch):
        monkeypatch.setattr(settings, "IDENTITY_WEBHOOK_SECRET", None)
        monkeypatch.setattr(settings, "DEBUG_MODE", "production")

        response = client.post("/hooks/identity/principal-created",
                               json={"id": "intruder", "metadata": {"role": "admin"}})

        assert response.status_code == 401
        assert client.get("/profiles/intruder", headers=as_user("admin1")).status_code == 404
