import json
import logging
from typing import List

from sqlalchemy import desc
from sqlalchemy.orm import Session

from onlinejudge.crud.base import CRUDBase
from onlinejudge.db.models import Submission
from onlinejudge.schemas.submission import SubmissionCreate, TestCaseResult, TERMINAL_VERDICTS

logger = logging.getLogger(__name__)


class CRUDSubmission(CRUDBase[Submission, SubmissionCreate]):
    @staticmethod
    def save_judged(
            db: Session,
            *,
            db_obj: Submission,
            results: List[TestCaseResult]
    ) -> Submission:
        if db_obj.verdict not in {v.value for v in TERMINAL_VERDICTS}:
            raise ValueError(f"Refusing to persist submission with non-terminal verdict {db_obj.verdict}")

        db_obj.results_json = json.dumps([result.model_dump() for result in results])
        db.add(db_obj)
        try:
            db.commit()
            db.refresh(db_obj)
            return db_obj
        except Exception:
            logger.error(f"Failed to save judged submission for problem {db_obj.problem_id}", exc_info=True)
            db.rollback()
            raise

    def get_by_problem(self, db: Session, *, problem_id: int) -> List[Submission]:
        return (
            db.query(self.model)
            .filter(Submission.problem_id == problem_id)
            .order_by(desc(Submission.submitted_at), desc(Submission.id))
            .all()
        )

    def get_recent(self, db: Session, *, limit: int = 10) -> List[Submission]:
        return (
            db.query(self.model)
            .order_by(desc(Submission.submitted_at), desc(Submission.id))
            .limit(limit)
            .all()
        )


submission = CRUDSubmission(Submission)
