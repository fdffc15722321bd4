import logging
from typing import List

from sqlalchemy.orm import Session

from onlinejudge.crud.base import CRUDBase
from onlinejudge.db.models import Problem, TestCase
from onlinejudge.schemas.problem import ProblemCreate, TestCaseCreate

logger = logging.getLogger(__name__)


class CRUDProblem(CRUDBase[Problem, ProblemCreate]):
    def create(self, db: Session, *, obj_in: ProblemCreate) -> Problem:
        db_obj = Problem(
            title=obj_in.title,
            description=obj_in.description,
            difficulty=obj_in.difficulty.value,
            time_limit_ms=obj_in.time_limit_ms,
            memory_limit_kb=obj_in.memory_limit_kb,
        )
        db.add(db_obj)
        try:
            db.commit()
            db.refresh(db_obj)
            return db_obj
        except Exception:
            logger.error(f"Failed to create problem '{obj_in.title}'", exc_info=True)
            db.rollback()
            raise

    def get_multi_ordered(self, db: Session) -> List[Problem]:
        return db.query(self.model).order_by(self.model.id.asc()).all()

    def count(self, db: Session) -> int:
        return db.query(self.model).count()

    @staticmethod
    def get_test_cases(db: Session, *, problem_id: int) -> List[TestCase]:
        return (
            db.query(TestCase)
            .filter(TestCase.problem_id == problem_id)
            .order_by(TestCase.order_index.asc(), TestCase.id.asc())
            .all()
        )

    @staticmethod
    def get_visible_test_cases(db: Session, *, problem_id: int) -> List[TestCase]:
        return (
            db.query(TestCase)
            .filter(TestCase.problem_id == problem_id, TestCase.is_hidden.is_(False))
            .order_by(TestCase.order_index.asc(), TestCase.id.asc())
            .all()
        )

    @staticmethod
    def add_test_case(db: Session, *, problem_id: int, obj_in: TestCaseCreate) -> TestCase:
        db_obj = TestCase(problem_id=problem_id, **obj_in.model_dump())
        db.add(db_obj)
        try:
            db.commit()
            db.refresh(db_obj)
            return db_obj
        except Exception:
            logger.error(f"Failed to add test case to problem {problem_id}", exc_info=True)
            db.rollback()
            raise


problem = CRUDProblem(Problem)
