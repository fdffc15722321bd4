from datetime import datetime
from enum import Enum
from typing import Optional, List

from pydantic import BaseModel, Field


class Verdict(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    WRONG_ANSWER = "WRONG_ANSWER"
    TIME_LIMIT_EXCEEDED = "TIME_LIMIT_EXCEEDED"
    MEMORY_LIMIT_EXCEEDED = "MEMORY_LIMIT_EXCEEDED"
    RUNTIME_ERROR = "RUNTIME_ERROR"
    COMPILATION_ERROR = "COMPILATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


TERMINAL_VERDICTS = frozenset(v for v in Verdict if v != Verdict.PENDING)

HIDDEN_PLACEHOLDER = "[Hidden]"


class TestCaseResult(BaseModel):
    test_case_number: int
    passed: bool
    actual_output: Optional[str] = None
    expected_output: Optional[str] = None
    execution_time_sec: float = 0.0
    memory_used: Optional[int] = None
    hidden: bool = False


class SubmissionCreate(BaseModel):
    problem_id: int
    language_id: int
    source_code: str = Field(min_length=1)


class SubmissionResponse(BaseModel):
    id: Optional[int] = None
    problem_id: int
    problem_title: Optional[str] = None
    language_id: int
    language_name: Optional[str] = None
    verdict: Verdict
    execution_time_sec: Optional[float] = None
    memory_used: Optional[int] = None
    output: Optional[str] = None
    compile_output: Optional[str] = None
    error_message: Optional[str] = None
    submitted_at: Optional[datetime] = None
    test_case_results: List[TestCaseResult] = []
