from typing import Generator

from sqlalchemy.orm import Session

from onlinejudge.db.session import SessionLocal
from onlinejudge.sandbox.backends.base import ExecutionBackend
from onlinejudge.sandbox.factory import get_execution_backend


def get_db() -> Generator:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_backend() -> ExecutionBackend:
    return get_execution_backend()
