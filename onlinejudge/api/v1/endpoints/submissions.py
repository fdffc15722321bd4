import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from onlinejudge.api import deps
from onlinejudge.sandbox.backends.base import ExecutionBackend
from onlinejudge.schemas.submission import SubmissionCreate, SubmissionResponse
from onlinejudge.services import judge_service

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/", response_model=SubmissionResponse)
async def submit_code(
        submission_in: SubmissionCreate,
        db: Session = Depends(deps.get_db),
        backend: ExecutionBackend = Depends(deps.get_backend)
):
    try:
        return await judge_service.submit_code(db=db, submission_data=submission_in, backend=backend)
    except HTTPException as e:
        raise e
    except Exception as e:
        logger.error(f"API Error judging submission: {type(e).__name__}: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to process submission.")


@router.get("/recent", response_model=List[SubmissionResponse])
async def read_recent_submissions(db: Session = Depends(deps.get_db)):
    return judge_service.get_recent_submissions(db)


@router.get("/problem/{problem_id}", response_model=List[SubmissionResponse])
async def read_problem_submissions(problem_id: int, db: Session = Depends(deps.get_db)):
    return judge_service.get_submissions_for_problem(db, problem_id)


@router.get("/{submission_id}", response_model=SubmissionResponse)
async def read_submission(submission_id: int, db: Session = Depends(deps.get_db)):
    return judge_service.get_submission(db, submission_id)
