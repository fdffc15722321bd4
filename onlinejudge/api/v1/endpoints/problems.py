from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from onlinejudge.api import deps
from onlinejudge.schemas.problem import Problem, ProblemCreate, ProblemMinimal, ProblemPublic, TestCase, TestCaseCreate
from onlinejudge.services import problem_service

router = APIRouter()


@router.get("/", response_model=List[ProblemMinimal])
async def read_problems(db: Session = Depends(deps.get_db)):
    return problem_service.get_all_problems(db)


@router.get("/{problem_id}", response_model=ProblemPublic)
async def read_problem(problem_id: int, db: Session = Depends(deps.get_db)):
    return problem_service.get_problem_by_id(db, problem_id)


@router.post("/", response_model=Problem)
async def create_problem(problem_in: ProblemCreate, db: Session = Depends(deps.get_db)):
    return problem_service.create_problem(db, problem_in)


@router.post("/{problem_id}/testcases", response_model=TestCase)
async def add_test_case(problem_id: int, test_case_in: TestCaseCreate, db: Session = Depends(deps.get_db)):
    return problem_service.add_test_case(db, problem_id, test_case_in)
