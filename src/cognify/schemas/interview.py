"""Mock interview schemas and the phase order."""

import enum
from datetime import datetime
from typing import Dict, List, Literal, Optional, Union

from pydantic import Field

from cognify.schemas.common import CamelModel, utcnow


class InterviewPhase(str, enum.Enum):
    """Stages of a mock interview, in protocol order."""

    problem_understanding = "problem_understanding"
    coding = "coding"
    optimization = "optimization"
    edge_cases = "edge_cases"

    @property
    def rank(self) -> int:
        return _PHASE_RANK[self]

    def next(self) -> Optional["InterviewPhase"]:
        """Following phase, or None when this is the terminal phase."""
        return _NEXT_PHASE[self]

    @property
    def is_terminal(self) -> bool:
        return self.next() is None


_NEXT_PHASE: Dict[InterviewPhase, Optional[InterviewPhase]] = {
    InterviewPhase.problem_understanding: InterviewPhase.coding,
    InterviewPhase.coding: InterviewPhase.optimization,
    InterviewPhase.optimization: InterviewPhase.edge_cases,
    InterviewPhase.edge_cases: None,
}

_PHASE_RANK: Dict[InterviewPhase, int] = {
    InterviewPhase.problem_understanding: 0,
    InterviewPhase.coding: 1,
    InterviewPhase.optimization: 2,
    InterviewPhase.edge_cases: 3,
}


class ReadinessLevel(str, enum.Enum):
    beginner = "beginner"
    intermediate = "intermediate"
    advanced = "advanced"
    interview_ready = "interview_ready"


class InterviewTurn(CamelModel):
    """A candidate answer recorded during the interview."""

    timestamp: datetime = Field(default_factory=utcnow)
    user_response: str
    code_snapshot: Optional[str] = None
    turn_id: Optional[str] = None
    next_question: Optional[str] = None
    should_end: bool = False


class Evaluation(CamelModel):
    """Scored assessment of one interview answer."""

    score: int = Field(default=50, ge=0, le=100)
    clarity: int = Field(default=50, ge=0, le=100)
    confidence: int = Field(default=50, ge=0, le=100)
    technical_depth: int = Field(default=50, ge=0, le=100)
    strengths: List[str] = []
    weaknesses: List[str] = []
    feedback_text: str = ""


class InterviewState(CamelModel):
    """Interview sub-record of a session."""

    interviewer_id: str
    start_time: datetime = Field(default_factory=utcnow)
    duration_budget_ms: int
    current_phase: InterviewPhase = InterviewPhase.problem_understanding
    questions: List[InterviewTurn] = []
    evaluations: List[Evaluation] = []
    end_time: Optional[datetime] = None
    total_duration_ms: Optional[int] = None

    @property
    def ended(self) -> bool:
        return self.end_time is not None

    def find_turn(self, turn_id: str) -> Optional[int]:
        for index, turn in enumerate(self.questions):
            if turn.turn_id == turn_id:
                return index
        return None


class InterviewReport(CamelModel):
    """Comprehensive end-of-interview report."""

    overall_score: int = 0
    problem_solving: int = 0
    communication: int = 0
    technical_skill: int = 0
    strengths: List[str] = []
    improvements: List[str] = []
    readiness_level: ReadinessLevel = ReadinessLevel.beginner
    detailed_feedback: str = ""
    next_steps: List[str] = []


class Continue(CamelModel):
    type: Literal["continue"] = "continue"
    phase: InterviewPhase


class End(CamelModel):
    type: Literal["end"] = "end"


Progression = Union[Continue, End]


class TurnOutcome(CamelModel):
    """Result of one answered interview question."""

    evaluation: Evaluation
    next_question: Optional[str] = None
    should_end: bool = False
