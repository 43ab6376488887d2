"""Mock interview phase state machine and round protocol."""

import json
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence

from cognify import errors, prompts
from cognify.clients.gemini import GenerationClient, GenerationOptions
from cognify.config import Settings, get_settings
from cognify.schemas.common import utcnow
from cognify.schemas.interview import (
    Continue,
    End,
    Evaluation,
    InterviewPhase,
    InterviewReport,
    InterviewState,
    InterviewTurn,
    Progression,
    ReadinessLevel,
    TurnOutcome,
)
from cognify.schemas.sessions import CodeIteration, Problem, Session
from cognify.services.prompt_builder import build
from cognify.services.tutor import require_problem

logger = logging.getLogger(__name__)

NEUTRAL_QUALITY = 50.0


def elapsed_ms(start: datetime, end: datetime) -> int:
    return int((end - start) / timedelta(milliseconds=1))


def average_quality(evaluations: Sequence[Evaluation], recent: int = 3) -> float:
    """Mean score of the last `recent` evaluations, neutral when there are none."""
    window = list(evaluations)[-recent:] if recent > 0 else []
    if not window:
        return NEUTRAL_QUALITY
    return sum(e.score for e in window) / len(window)


def advance(
    interview: InterviewState,
    now: Optional[datetime] = None,
    quality_threshold: float = 70.0,
    min_questions: int = 2,
    recent: int = 3,
) -> Progression:
    """Decide whether the interview ends, moves one phase forward, or stays.

    Running past the duration budget always ends the interview. Otherwise the
    phase advances by exactly one step when recent answers average above the
    threshold and enough questions have been answered.
    """
    now = now or utcnow()
    if elapsed_ms(interview.start_time, now) > interview.duration_budget_ms:
        return End()

    phase = interview.current_phase
    following = phase.next()
    if (
        following is not None
        and average_quality(interview.evaluations, recent) > quality_threshold
        and len(interview.questions) >= min_questions
    ):
        return Continue(phase=following)
    return Continue(phase=phase)


def _clamp(value: Any, default: int = 50) -> int:
    try:
        number = int(round(float(value)))
    except (TypeError, ValueError):
        return default
    return min(100, max(0, number))


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None]


class InterviewEngine:
    """Runs mock interview rounds against the generation backend."""

    def __init__(self, client: GenerationClient, settings: Optional[Settings] = None):
        self.client = client
        self.settings = settings or get_settings()

    async def start(
        self, session: Session, duration_ms: Optional[int] = None
    ) -> tuple[InterviewState, str]:
        """Open a new interview on the session and produce the first question.

        A loaded problem is required so the first question can refer to it.
        Any previous interview on the session is replaced.
        """
        problem = require_problem(session.current_problem)
        now = utcnow()
        interview = InterviewState(
            interviewer_id=f"interviewer_{int(now.timestamp() * 1000)}",
            start_time=now,
            duration_budget_ms=duration_ms
            or self.settings.interview_duration_minutes * 60 * 1000,
        )
        first_question = await self.generate_question(
            problem, interview.current_phase, interview
        )
        session.interview = interview
        return interview, first_question

    async def submit_turn(
        self,
        session: Session,
        user_response: str,
        current_code: Optional[str] = None,
        turn_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> TurnOutcome:
        """Record an answer, evaluate it, and decide what comes next."""
        interview = self._require_active(session)
        problem = require_problem(session.current_problem)

        if turn_id:
            index = interview.find_turn(turn_id)
            if index is not None:
                logger.info("Replaying recorded interview turn %s", turn_id)
                turn = interview.questions[index]
                return TurnOutcome(
                    evaluation=interview.evaluations[index],
                    next_question=turn.next_question,
                    should_end=turn.should_end,
                )

        turn = InterviewTurn(
            user_response=user_response,
            code_snapshot=(current_code or "")[: self.settings.code_snapshot_chars]
            or None,
            turn_id=turn_id,
        )
        evaluation = await self.evaluate(
            problem, interview, user_response, current_code
        )
        interview.questions.append(turn)
        interview.evaluations.append(evaluation)

        progression = advance(
            interview,
            now=now,
            quality_threshold=self.settings.interview_quality_threshold,
            min_questions=self.settings.interview_min_questions,
            recent=self.settings.interview_recent_evaluations,
        )
        if isinstance(progression, End):
            turn.should_end = True
            return TurnOutcome(evaluation=evaluation, should_end=True)

        next_question = await self.generate_question(
            problem, progression.phase, interview, evaluation
        )
        interview.current_phase = progression.phase
        turn.next_question = next_question
        return TurnOutcome(evaluation=evaluation, next_question=next_question)

    async def end(self, session: Session) -> InterviewReport:
        """Stamp the end of the interview and build the final report."""
        interview = self._require_active(session)
        problem = require_problem(session.current_problem)

        end_time = utcnow()
        interview.end_time = end_time
        interview.total_duration_ms = elapsed_ms(interview.start_time, end_time)
        return await self.generate_report(problem, interview, session.code_iterations)

    async def generate_question(
        self,
        problem: Problem,
        phase: InterviewPhase,
        interview: InterviewState,
        latest: Optional[Evaluation] = None,
    ) -> str:
        prompt = build(
            prompts.INTERVIEW_QUESTIONS[phase.value],
            {
                "problem_title": problem.title,
                "problem_description": problem.description[:800],
                "previous_evaluations": json.dumps(
                    [e.to_wire() for e in interview.evaluations]
                ),
                "strengths": ", ".join(latest.strengths) if latest else "",
                "weaknesses": ", ".join(latest.weaknesses) if latest else "",
            },
        )
        result = await self.client.generate(
            prompt, GenerationOptions(temperature=0.8)
        )
        return result.text

    async def evaluate(
        self,
        problem: Problem,
        interview: InterviewState,
        user_response: str,
        current_code: Optional[str],
    ) -> Evaluation:
        prompt = build(
            prompts.EVALUATE_RESPONSE,
            {
                "phase": interview.current_phase.value,
                "problem_title": problem.title,
                "user_response": user_response,
                "code_snippet": (current_code or "")[:500] or "No code yet",
                "context": json.dumps(
                    [turn.user_response for turn in interview.questions[-3:]]
                ),
            },
        )
        result = await self.client.generate(
            prompt, GenerationOptions(temperature=0.3)
        )
        metadata: Dict[str, Any] = result.metadata or {}
        return Evaluation(
            score=_clamp(metadata.get("score")),
            clarity=_clamp(metadata.get("clarity")),
            confidence=_clamp(metadata.get("confidence")),
            technical_depth=_clamp(metadata.get("technicalDepth")),
            strengths=_string_list(metadata.get("strengths")),
            weaknesses=_string_list(metadata.get("weaknesses")),
            feedback_text=result.text,
        )

    async def generate_report(
        self,
        problem: Problem,
        interview: InterviewState,
        code_iterations: Sequence[CodeIteration],
    ) -> InterviewReport:
        prompt = build(
            prompts.INTERVIEW_REPORT,
            {
                "problem_title": problem.title,
                "duration_minutes": (interview.total_duration_ms or 0) // 60000,
                "total_questions": len(interview.questions),
                "evaluations": json.dumps(
                    [e.to_wire() for e in interview.evaluations]
                ),
                "code_iterations": len(code_iterations),
                "phases_completed": interview.current_phase.value,
            },
        )
        result = await self.client.generate(
            prompt, GenerationOptions(temperature=0.5, max_tokens=1200)
        )
        metadata: Dict[str, Any] = result.metadata or {}

        readiness = metadata.get("readinessLevel")
        try:
            readiness_level = ReadinessLevel(readiness)
        except ValueError:
            readiness_level = ReadinessLevel.beginner

        return InterviewReport(
            overall_score=_clamp(metadata.get("overallScore"), default=0),
            problem_solving=_clamp(metadata.get("problemSolving"), default=0),
            communication=_clamp(metadata.get("communication"), default=0),
            technical_skill=_clamp(metadata.get("technicalSkill"), default=0),
            strengths=_string_list(metadata.get("strengths")),
            improvements=_string_list(metadata.get("improvements")),
            readiness_level=readiness_level,
            detailed_feedback=result.text,
            next_steps=_string_list(metadata.get("nextSteps")),
        )

    @staticmethod
    def _require_active(session: Session) -> InterviewState:
        interview = session.interview
        if interview is None:
            raise errors.ValidationError(
                "No interview in progress. Start an interview first."
            )
        if interview.ended:
            raise errors.ValidationError(
                "This interview has already ended. Start a new interview."
            )
        return interview
