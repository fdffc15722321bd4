from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, Float, ForeignKey
from sqlalchemy.orm import relationship

from onlinejudge.db.base_class import Base


class Problem(Base):
    __tablename__ = "problems"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    difficulty = Column(String, default="EASY", nullable=False)
    time_limit_ms = Column(Integer, default=1000, nullable=False)
    memory_limit_kb = Column(Integer, default=128000, nullable=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    test_cases = relationship("TestCase", back_populates="problem", order_by="TestCase.order_index",
                              cascade="all, delete-orphan")


class TestCase(Base):
    __tablename__ = "test_cases"

    id = Column(Integer, primary_key=True, index=True)
    problem_id = Column(Integer, ForeignKey("problems.id"), nullable=False, index=True)
    input = Column(Text, nullable=False, default="")
    expected_output = Column(Text, nullable=False, default="")
    is_hidden = Column(Boolean(), default=False, nullable=False)
    order_index = Column(Integer, default=0, nullable=False)

    problem = relationship("Problem", back_populates="test_cases")


class Submission(Base):
    __tablename__ = "submissions"

    id = Column(Integer, primary_key=True, index=True)
    problem_id = Column(Integer, ForeignKey("problems.id"), nullable=False, index=True)
    language_id = Column(Integer, nullable=False)
    language_name = Column(String, nullable=True)
    source_code = Column(Text, nullable=False)

    verdict = Column(String, default="PENDING", nullable=False)
    execution_time_sec = Column(Float, nullable=True)
    memory_used = Column(Integer, nullable=True)
    output = Column(Text, nullable=True)
    compile_output = Column(Text, nullable=True)
    error_message = Column(Text, nullable=True)
    results_json = Column(Text, nullable=True)
    submitted_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
