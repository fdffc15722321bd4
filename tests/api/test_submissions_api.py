from fastapi.testclient import TestClient

from onlinejudge.sandbox.backends.base import ExecutionResult

PYTHON = 71
CORRECT_PYTHON_CODE = "a, b = map(int, input().split())\nprint(a + b)"


def test_submit_accepted(client: TestClient, two_sum, fake_backend, make_ok):
    fake_backend.results = [make_ok("3"), make_ok("10"), make_ok("300")]

    response = client.post("/api/v1/submissions/", json={
        "problem_id": two_sum.id, "language_id": PYTHON, "source_code": CORRECT_PYTHON_CODE,
    })

    assert response.status_code == 200
    data = response.json()
    assert data["verdict"] == "ACCEPTED"
    assert data["problem_title"] == "Two Sum"
    assert data["language_name"] == "Python 3"
    assert len(data["test_case_results"]) == 3
    hidden = data["test_case_results"][2]
    assert hidden["hidden"] is True
    assert hidden["expected_output"] == "[Hidden]"
    assert fake_backend.calls[0]["source_code"] == CORRECT_PYTHON_CODE


def test_submit_compilation_error(client: TestClient, two_sum, fake_backend):
    fake_backend.results = [ExecutionResult.compilation_error("SyntaxError: invalid syntax")]

    response = client.post("/api/v1/submissions/", json={
        "problem_id": two_sum.id, "language_id": PYTHON, "source_code": "print(",
    })

    assert response.status_code == 200
    data = response.json()
    assert data["verdict"] == "COMPILATION_ERROR"
    assert data["compile_output"] == "SyntaxError: invalid syntax"
    assert data["test_case_results"] == []


def test_submit_to_unknown_problem(client: TestClient, fake_backend):
    response = client.post("/api/v1/submissions/", json={
        "problem_id": 999, "language_id": PYTHON, "source_code": CORRECT_PYTHON_CODE,
    })
    assert response.status_code == 404
    assert fake_backend.calls == []


def test_submit_empty_source_is_rejected(client: TestClient, two_sum):
    response = client.post("/api/v1/submissions/", json={
        "problem_id": two_sum.id, "language_id": PYTHON, "source_code": "",
    })
    assert response.status_code == 422


def test_submit_unsupported_language(client: TestClient, two_sum, fake_backend):
    response = client.post("/api/v1/submissions/", json={
        "problem_id": two_sum.id, "language_id": 1, "source_code": CORRECT_PYTHON_CODE,
    })
    assert response.status_code == 200
    assert response.json()["verdict"] == "INTERNAL_ERROR"
    assert fake_backend.calls == []


def test_read_submission_back(client: TestClient, two_sum, fake_backend, make_ok):
    fake_backend.results = [make_ok("3"), make_ok("99")]
    created = client.post("/api/v1/submissions/", json={
        "problem_id": two_sum.id, "language_id": PYTHON, "source_code": CORRECT_PYTHON_CODE,
    }).json()

    response = client.get(f"/api/v1/submissions/{created['id']}")
    assert response.status_code == 200
    data = response.json()
    assert data["verdict"] == "WRONG_ANSWER"
    assert data["output"] == "99"
    assert data["test_case_results"] == created["test_case_results"]

    by_problem = client.get(f"/api/v1/submissions/problem/{two_sum.id}").json()
    assert [s["id"] for s in by_problem] == [created["id"]]
    recent = client.get("/api/v1/submissions/recent").json()
    assert [s["id"] for s in recent] == [created["id"]]


def test_read_unknown_submission(client: TestClient):
    response = client.get("/api/v1/submissions/12345")
    assert response.status_code == 404


def test_health_reports_backend(client: TestClient, fake_backend):
    assert client.get("/health").json() == {"status": "ok", "executor": "FAKE", "executor_available": True}
    fake_backend.available = False
    assert client.get("/health").json()["status"] == "degraded"
