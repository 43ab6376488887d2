"""Session-related schemas."""

import enum
from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID, uuid4

from pydantic import Field

from cognify.schemas.common import CamelModel, utcnow
from cognify.schemas.interview import InterviewState


class Mode(str, enum.Enum):
    """Coaching mode. Drives hint policy only."""

    practice = "practice"
    interview = "interview"
    learning = "learning"


class Problem(CamelModel):
    """Snapshot of the problem shown in the user's tab."""

    platform: str
    title: str
    difficulty: Optional[str] = None
    description: str = ""
    constraints: str = ""
    examples: List[Any] = []
    tags: List[str] = []
    extracted_at: datetime = Field(default_factory=utcnow)


class HintRecord(CamelModel):
    """One hint request. Hints are never removed from a session."""

    timestamp: datetime = Field(default_factory=utcnow)
    question: Optional[str] = None
    action_type: str = "chat"
    code_snapshot: Optional[str] = None


class CodeIteration(CamelModel):
    """One code analysis round."""

    timestamp: datetime = Field(default_factory=utcnow)
    code_hash: str
    feedback_summary: Optional[str] = None


class Session(CamelModel):
    """All mutable state owned by one conversation key."""

    id: UUID = Field(default_factory=uuid4)
    start_time: datetime = Field(default_factory=utcnow)
    current_problem: Optional[Problem] = None
    hints: List[HintRecord] = []
    code_iterations: List[CodeIteration] = []
    interview: Optional[InterviewState] = None
    mode: Mode = Mode.practice
