import json
import logging
from typing import List, Optional, Sequence

from fastapi import HTTPException, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from onlinejudge.core.logging_config import log_judge_event
from onlinejudge.crud import crud_problem, crud_submission
from onlinejudge.db import models as db_models
from onlinejudge.sandbox.backends.base import ExecutionBackend, ExecutionResult, ExecutionStatus
from onlinejudge.sandbox.languages import is_supported, language_names, supported_language_list
from onlinejudge.schemas.problem import TestCase
from onlinejudge.schemas.submission import (
    HIDDEN_PLACEHOLDER, SubmissionCreate, SubmissionResponse, TestCaseResult, Verdict
)

logger = logging.getLogger(__name__)

RESOURCE_VERDICTS = {
    ExecutionStatus.TIME_LIMIT_EXCEEDED: Verdict.TIME_LIMIT_EXCEEDED,
    ExecutionStatus.MEMORY_LIMIT_EXCEEDED: Verdict.MEMORY_LIMIT_EXCEEDED,
    ExecutionStatus.RUNTIME_ERROR: Verdict.RUNTIME_ERROR,
}


class JudgeOutcome(BaseModel):
    verdict: Verdict
    execution_time_ms: int = 0
    output: Optional[str] = None
    compile_output: Optional[str] = None
    error_message: Optional[str] = None
    results: List[TestCaseResult] = []

    @property
    def execution_time_sec(self) -> float:
        return self.execution_time_ms / 1000


def normalize_output(output: Optional[str]) -> str:
    """Canonical form used for answer comparison: unified line endings, outer whitespace trimmed."""
    if output is None:
        return ""
    return output.replace("\r\n", "\n").replace("\r", "\n").strip()


def _record(number: int, test_case: TestCase, passed: bool, actual_output: str,
            result: ExecutionResult) -> TestCaseResult:
    hidden = test_case.is_hidden
    return TestCaseResult(
        test_case_number=number,
        passed=passed,
        actual_output=HIDDEN_PLACEHOLDER if hidden else actual_output,
        expected_output=HIDDEN_PLACEHOLDER if hidden else test_case.expected_output,
        execution_time_sec=result.execution_time_ms / 1000,
        hidden=hidden,
    )


async def judge(
        backend: ExecutionBackend,
        source_code: str,
        language_id: int,
        test_cases: Sequence[TestCase],
        time_limit_ms: int,
        memory_limit_kb: int
) -> JudgeOutcome:
    """Run ``source_code`` against ``test_cases`` in order and resolve a verdict.

    Judging stops at the first test case that does not pass; nothing runs
    after a terminal verdict is reached. The reported execution time is the
    maximum over every attempt made, whatever the verdict.
    """
    results: List[TestCaseResult] = []
    max_time_ms = 0

    for number, tc in enumerate(test_cases, start=1):
        try:
            result = await backend.execute(source_code, language_id, tc.input, time_limit_ms, memory_limit_kb)
        except Exception as e:
            logger.error(f"Backend {backend.name} raised while judging test case {number}: {e}", exc_info=True)
            result = ExecutionResult.internal_error("Executor error while running the submission.")

        max_time_ms = max(max_time_ms, result.execution_time_ms)

        if result.status == ExecutionStatus.COMPILATION_ERROR:
            return JudgeOutcome(verdict=Verdict.COMPILATION_ERROR, execution_time_ms=max_time_ms,
                                compile_output=result.stderr, results=results)

        if result.status == ExecutionStatus.INTERNAL_ERROR:
            return JudgeOutcome(verdict=Verdict.INTERNAL_ERROR, execution_time_ms=max_time_ms,
                                error_message=result.message or "Internal error while judging.", results=results)

        if result.status in RESOURCE_VERDICTS:
            results.append(_record(number, tc, False, result.stderr, result))
            verdict = RESOURCE_VERDICTS[result.status]
            error_message = None
            if verdict == Verdict.RUNTIME_ERROR:
                # stderr of a hidden case can echo its input
                error_message = (f"Runtime error on hidden test case {number}" if tc.is_hidden
                                 else result.stderr)
            return JudgeOutcome(
                verdict=verdict, execution_time_ms=max_time_ms,
                error_message=error_message, results=results
            )

        actual = normalize_output(result.stdout)
        passed = actual == normalize_output(tc.expected_output)
        results.append(_record(number, tc, passed, actual, result))
        if not passed:
            return JudgeOutcome(verdict=Verdict.WRONG_ANSWER, execution_time_ms=max_time_ms,
                                output=None if tc.is_hidden else actual, results=results)

    return JudgeOutcome(verdict=Verdict.ACCEPTED, execution_time_ms=max_time_ms, results=results)


def _build_response(db_submission: db_models.Submission, problem: Optional[db_models.Problem],
                    results: List[TestCaseResult]) -> SubmissionResponse:
    return SubmissionResponse(
        id=db_submission.id,
        problem_id=db_submission.problem_id,
        problem_title=problem.title if problem else "Unknown",
        language_id=db_submission.language_id,
        language_name=db_submission.language_name,
        verdict=Verdict(db_submission.verdict),
        execution_time_sec=db_submission.execution_time_sec,
        memory_used=db_submission.memory_used,
        output=db_submission.output,
        compile_output=db_submission.compile_output,
        error_message=db_submission.error_message,
        submitted_at=db_submission.submitted_at,
        test_case_results=results,
    )


async def _resolve(
        db: Session,
        backend: ExecutionBackend,
        problem: db_models.Problem,
        submission_data: SubmissionCreate
) -> JudgeOutcome:
    if not is_supported(submission_data.language_id):
        return JudgeOutcome(
            verdict=Verdict.INTERNAL_ERROR,
            error_message=f"Unsupported language. Supported: {', '.join(supported_language_list())}"
        )

    test_cases = [TestCase.model_validate(tc) for tc in crud_problem.problem.get_test_cases(db, problem_id=problem.id)]
    if not test_cases:
        return JudgeOutcome(verdict=Verdict.INTERNAL_ERROR, error_message="No test cases found for this problem")

    if not await backend.is_available():
        return JudgeOutcome(verdict=Verdict.INTERNAL_ERROR,
                            error_message="Execution backend is not available. Please try again later.")

    return await judge(backend, submission_data.source_code, submission_data.language_id, test_cases,
                       problem.time_limit_ms, problem.memory_limit_kb)


async def submit_code(
        db: Session,
        submission_data: SubmissionCreate,
        backend: ExecutionBackend
) -> SubmissionResponse:
    problem = crud_problem.problem.get(db, submission_data.problem_id)
    if not problem:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND,
                            detail=f"Problem not found: {submission_data.problem_id}")

    db_submission = db_models.Submission(
        problem_id=problem.id,
        language_id=submission_data.language_id,
        language_name=language_names().get(submission_data.language_id, "Unknown"),
        source_code=submission_data.source_code,
        verdict=Verdict.PENDING.value,
    )

    outcome = await _resolve(db, backend, problem, submission_data)

    db_submission.verdict = outcome.verdict.value
    db_submission.execution_time_sec = outcome.execution_time_sec
    db_submission.output = outcome.output
    db_submission.compile_output = outcome.compile_output
    db_submission.error_message = outcome.error_message
    crud_submission.submission.save_judged(db, db_obj=db_submission, results=outcome.results)

    if outcome.verdict == Verdict.INTERNAL_ERROR:
        logger.error(f"Submission {db_submission.id} for problem {problem.id} ended in INTERNAL_ERROR: "
                     f"{outcome.error_message}")
    log_judge_event(submission_id=db_submission.id, event_type="submission_judged",
                    details={"problem_id": problem.id, "language_id": submission_data.language_id,
                             "backend": backend.name, "verdict": outcome.verdict.value,
                             "execution_time_ms": outcome.execution_time_ms,
                             "test_cases_run": len(outcome.results)})

    return _build_response(db_submission, problem, outcome.results)


def _parse_results(db_submission: db_models.Submission) -> List[TestCaseResult]:
    if not db_submission.results_json:
        return []
    try:
        raw_results = json.loads(db_submission.results_json)
    except json.JSONDecodeError:
        logger.warning(f"Could not decode results_json for submission {db_submission.id}")
        return []
    if not isinstance(raw_results, list):
        logger.warning(f"results_json for submission {db_submission.id} is not a list: {type(raw_results)}")
        return []

    parsed: List[TestCaseResult] = []
    for item in raw_results:
        try:
            parsed.append(TestCaseResult(**item))
        except (TypeError, ValueError) as e:
            logger.warning(f"Skipping malformed test case result for submission {db_submission.id}: {e}")
    return parsed


def get_submission(db: Session, submission_id: int) -> SubmissionResponse:
    db_submission = crud_submission.submission.get(db, submission_id)
    if not db_submission:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND,
                            detail=f"Submission not found: {submission_id}")
    problem = crud_problem.problem.get(db, db_submission.problem_id)
    return _build_response(db_submission, problem, _parse_results(db_submission))


def get_submissions_for_problem(db: Session, problem_id: int) -> List[SubmissionResponse]:
    problem = crud_problem.problem.get(db, problem_id)
    if not problem:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Problem not found: {problem_id}")
    return [
        _build_response(sub, problem, _parse_results(sub))
        for sub in crud_submission.submission.get_by_problem(db, problem_id=problem_id)
    ]


def get_recent_submissions(db: Session, limit: int = 10) -> List[SubmissionResponse]:
    responses = []
    for sub in crud_submission.submission.get_recent(db, limit=limit):
        problem = crud_problem.problem.get(db, sub.problem_id)
        responses.append(_build_response(sub, problem, _parse_results(sub)))
    return responses
