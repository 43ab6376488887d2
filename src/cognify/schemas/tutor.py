"""Tutor-related schemas."""

from typing import Any, Dict, List, Optional

from cognify.schemas.common import CamelModel


class ProblemAnalysis(CamelModel):
    """Lightweight analysis returned when a problem is extracted."""

    difficulty: str = "medium"
    topics: List[str] = []
    patterns: List[str] = []
    estimated_time: int = 30
    prerequisites: List[str] = []
    summary: str = ""


class Hint(CamelModel):
    """Guiding response for the learner. Never a solution."""

    question: str
    type: str
    follow_up: Optional[str] = None


class CodeAnalysis(CamelModel):
    reasoning: str
    complexity: Optional[Dict[str, Any]] = None
    approach: Optional[str] = None
    considerations: List[str] = []
    questions: List[str] = []


class ConceptExplanation(CamelModel):
    simple_explanation: str
    mental_model: Optional[str] = None
    analogy: Optional[str] = None
    when_to_use: Optional[str] = None
    common_mistakes: List[str] = []


class Recommendations(CamelModel):
    problems: List[Dict[str, Any]] = []
    topics: List[str] = []
    study_plan: str = ""
    estimated_time_weeks: int = 4


class InterviewSummary(CamelModel):
    """Locally computed score summary from recorded evaluations."""

    average_score: int = 0
    total_questions: int = 0
    strengths: List[str] = []
    improvements: List[str] = []
