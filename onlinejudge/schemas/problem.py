from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Difficulty(str, Enum):
    EASY = "EASY"
    MEDIUM = "MEDIUM"
    HARD = "HARD"


class TestCaseBase(BaseModel):
    input: str = ""
    expected_output: str = ""
    is_hidden: bool = False
    order_index: int = 0


class TestCaseCreate(TestCaseBase):
    pass


class TestCase(TestCaseBase):
    id: int
    problem_id: int

    model_config = ConfigDict(from_attributes=True)


class SampleTestCase(BaseModel):
    input: str
    expected_output: str


class ProblemBase(BaseModel):
    title: str
    description: Optional[str] = None
    difficulty: Difficulty = Difficulty.EASY
    time_limit_ms: int = Field(default=1000, gt=0)
    memory_limit_kb: int = Field(default=128000, gt=0)


class ProblemCreate(ProblemBase):
    pass


class Problem(ProblemBase):
    id: int
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ProblemPublic(Problem):
    sample_test_cases: List[SampleTestCase] = []


class ProblemMinimal(BaseModel):
    id: int
    title: str
    difficulty: Difficulty
