import logging
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from onlinejudge.crud import crud_problem
from onlinejudge.schemas.problem import Difficulty, ProblemCreate, TestCaseCreate

logger = logging.getLogger(__name__)

SAMPLE_PROBLEMS: List[Dict[str, Any]] = [
    {
        "problem": ProblemCreate(
            title="Two Sum",
            description=(
                "## Problem Statement\n"
                "Given two integers, return their sum.\n\n"
                "## Input Format\n"
                "Two space-separated integers `a` and `b` where `-1000 ≤ a, b ≤ 1000`\n\n"
                "## Output Format\n"
                "A single integer representing the sum of `a` and `b`.\n"
            ),
            difficulty=Difficulty.EASY,
            time_limit_ms=1000,
            memory_limit_kb=128000,
        ),
        "tests": [("3 5", "8", False), ("-10 20", "10", False), ("0 0", "0", True), ("-500 500", "0", True)],
    },
    {
        "problem": ProblemCreate(
            title="Palindrome Check",
            description=(
                "## Problem Statement\n"
                "Given a string, determine if it is a palindrome. "
                "A palindrome reads the same forwards and backwards.\n\n"
                "## Input Format\n"
                "A single line containing a string `s` (1 ≤ |s| ≤ 100) of lowercase English letters.\n\n"
                "## Output Format\n"
                "Print `YES` if the string is a palindrome, otherwise print `NO`.\n"
            ),
            difficulty=Difficulty.EASY,
            time_limit_ms=1000,
            memory_limit_kb=128000,
        ),
        "tests": [("racecar", "YES", False), ("hello", "NO", False), ("a", "YES", True), ("abba", "YES", True)],
    },
    {
        "problem": ProblemCreate(
            title="FizzBuzz",
            description=(
                "## Problem Statement\n"
                "Given an integer `n`, print:\n"
                "- `FizzBuzz` if `n` is divisible by both 3 and 5\n"
                "- `Fizz` if `n` is divisible by 3\n"
                "- `Buzz` if `n` is divisible by 5\n"
                "- The number itself otherwise\n\n"
                "## Input Format\n"
                "A single integer `n` (1 ≤ n ≤ 1000)\n"
            ),
            difficulty=Difficulty.EASY,
            time_limit_ms=1000,
            memory_limit_kb=128000,
        ),
        "tests": [("15", "FizzBuzz", False), ("9", "Fizz", False), ("10", "Buzz", False),
                  ("7", "7", True), ("30", "FizzBuzz", True)],
    },
    {
        "problem": ProblemCreate(
            title="Factorial",
            description=(
                "## Problem Statement\n"
                "Given a non-negative integer `n`, print `n!`.\n\n"
                "## Input Format\n"
                "A single integer `n` (0 ≤ n ≤ 12)\n"
            ),
            difficulty=Difficulty.MEDIUM,
            time_limit_ms=1000,
            memory_limit_kb=128000,
        ),
        "tests": [("5", "120", False), ("0", "1", False), ("10", "3628800", True), ("12", "479001600", True)],
    },
    {
        "problem": ProblemCreate(
            title="Prime Number Check",
            description=(
                "## Problem Statement\n"
                "Given a positive integer `n`, determine if it is a prime number.\n\n"
                "## Output Format\n"
                "Print `YES` if `n` is prime, otherwise print `NO`.\n"
            ),
            difficulty=Difficulty.MEDIUM,
            time_limit_ms=2000,
            memory_limit_kb=128000,
        ),
        "tests": [("17", "YES", False), ("1", "NO", False), ("2", "YES", False),
                  ("999983", "YES", True), ("100", "NO", True)],
    },
]


def seed_sample_problems(db: Session) -> int:
    """Insert the sample problems when the problem table is empty. Returns how many were created."""
    if crud_problem.problem.count(db) > 0:
        logger.info("Problems already present, skipping sample data.")
        return 0

    for sample in SAMPLE_PROBLEMS:
        problem = crud_problem.problem.create(db, obj_in=sample["problem"])
        for order_index, (tc_input, tc_output, hidden) in enumerate(sample["tests"]):
            crud_problem.problem.add_test_case(
                db, problem_id=problem.id,
                obj_in=TestCaseCreate(input=tc_input, expected_output=tc_output,
                                      is_hidden=hidden, order_index=order_index)
            )
    logger.info(f"Seeded {len(SAMPLE_PROBLEMS)} sample problems.")
    return len(SAMPLE_PROBLEMS)
