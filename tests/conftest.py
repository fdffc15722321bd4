from typing import Generator, List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from onlinejudge.api.deps import get_backend, get_db
from onlinejudge.crud import crud_problem
from onlinejudge.db import models  # noqa: F401
from onlinejudge.db.base_class import Base
from onlinejudge.main import app
from onlinejudge.sandbox.backends.base import ExecutionResult, ExecutionStatus
from onlinejudge.schemas.problem import ProblemCreate, TestCaseCreate

TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeBackend:
    """Returns scripted results in order and records every execute call."""

    name = "FAKE"

    def __init__(self, results: Optional[List[ExecutionResult]] = None, available: bool = True):
        self.results = list(results or [])
        self.available = available
        self.calls = []

    async def is_available(self) -> bool:
        return self.available

    async def execute(self, source_code, language_id, stdin, time_limit_ms, memory_limit_kb):
        self.calls.append({
            "source_code": source_code,
            "language_id": language_id,
            "stdin": stdin,
            "time_limit_ms": time_limit_ms,
            "memory_limit_kb": memory_limit_kb,
        })
        if not self.results:
            raise AssertionError("FakeBackend ran out of scripted results")
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


def ok(stdout: str, time_ms: int = 10) -> ExecutionResult:
    return ExecutionResult(status=ExecutionStatus.SUCCESS, stdout=stdout, exit_code=0, execution_time_ms=time_ms)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def make_ok():
    return ok


@pytest.fixture
def client(db: Session, fake_backend: FakeBackend) -> Generator[TestClient, None, None]:
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_backend] = lambda: fake_backend
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def two_sum(db: Session):
    problem = crud_problem.problem.create(
        db, obj_in=ProblemCreate(title="Two Sum", time_limit_ms=1000, memory_limit_kb=65536)
    )
    cases = [("1 2", "3", False), ("5 5", "10", False), ("100 200", "300", True)]
    for order_index, (tc_input, expected, hidden) in enumerate(cases):
        crud_problem.problem.add_test_case(
            db, problem_id=problem.id,
            obj_in=TestCaseCreate(input=tc_input, expected_output=expected, is_hidden=hidden, order_index=order_index)
        )
    return problem
