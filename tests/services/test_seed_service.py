from sqlalchemy.orm import Session

from onlinejudge.crud import crud_problem
from onlinejudge.services import problem_service
from onlinejudge.services.seed_service import SAMPLE_PROBLEMS, seed_sample_problems


def test_seed_inserts_sample_problems(db: Session):
    created = seed_sample_problems(db)

    assert created == len(SAMPLE_PROBLEMS) == 5
    titles = [p.title for p in crud_problem.problem.get_multi_ordered(db)]
    assert titles == ["Two Sum", "Palindrome Check", "FizzBuzz", "Factorial", "Prime Number Check"]


def test_seed_is_skipped_when_problems_exist(db: Session):
    seed_sample_problems(db)
    assert seed_sample_problems(db) == 0
    assert crud_problem.problem.count(db) == 5


def test_seeded_hidden_cases_are_not_samples(db: Session):
    seed_sample_problems(db)
    two_sum = crud_problem.problem.get_multi_ordered(db)[0]

    all_cases = crud_problem.problem.get_test_cases(db, problem_id=two_sum.id)
    public = problem_service.get_problem_by_id(db, two_sum.id)

    assert len(all_cases) == 4
    assert [tc.order_index for tc in all_cases] == [0, 1, 2, 3]
    assert [(s.input, s.expected_output) for s in public.sample_test_cases] == [("3 5", "8"), ("-10 20", "10")]
