import logging
from typing import List

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from onlinejudge.crud import crud_problem
from onlinejudge.db import models as db_models
from onlinejudge.schemas.problem import (
    ProblemCreate, ProblemMinimal, ProblemPublic, SampleTestCase, TestCaseCreate
)

logger = logging.getLogger(__name__)


def _get_or_404(db: Session, problem_id: int) -> db_models.Problem:
    problem = crud_problem.problem.get(db, problem_id)
    if not problem:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Problem not found: {problem_id}")
    return problem


def get_all_problems(db: Session) -> List[ProblemMinimal]:
    return [
        ProblemMinimal(id=p.id, title=p.title, difficulty=p.difficulty)
        for p in crud_problem.problem.get_multi_ordered(db)
    ]


def get_problem_by_id(db: Session, problem_id: int) -> ProblemPublic:
    problem = _get_or_404(db, problem_id)
    visible = crud_problem.problem.get_visible_test_cases(db, problem_id=problem_id)
    return ProblemPublic(
        id=problem.id,
        title=problem.title,
        description=problem.description,
        difficulty=problem.difficulty,
        time_limit_ms=problem.time_limit_ms,
        memory_limit_kb=problem.memory_limit_kb,
        created_at=problem.created_at,
        sample_test_cases=[SampleTestCase(input=tc.input, expected_output=tc.expected_output) for tc in visible],
    )


def create_problem(db: Session, problem_in: ProblemCreate) -> db_models.Problem:
    problem = crud_problem.problem.create(db, obj_in=problem_in)
    logger.info(f"Created problem {problem.id} '{problem.title}'")
    return problem


def add_test_case(db: Session, problem_id: int, test_case_in: TestCaseCreate) -> db_models.TestCase:
    _get_or_404(db, problem_id)
    return crud_problem.problem.add_test_case(db, problem_id=problem_id, obj_in=test_case_in)
