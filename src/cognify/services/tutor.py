"""Tutor operations: hints, code analysis, concepts and study plans."""

import hashlib
from typing import Any, Dict, List, Optional, Sequence

from cognify import errors, prompts
from cognify.clients.gemini import GenerationClient, GenerationOptions
from cognify.schemas.interview import Evaluation
from cognify.schemas.messages import ChatMessage, HintRequestData, ProblemData
from cognify.schemas.sessions import Mode, Problem
from cognify.schemas.tutor import (
    CodeAnalysis,
    ConceptExplanation,
    Hint,
    InterviewSummary,
    ProblemAnalysis,
    Recommendations,
)
from cognify.services.prompt_builder import build

ESTIMATED_MINUTES = {"easy": 15, "medium": 30, "hard": 45}


def code_hash(code: str) -> str:
    return hashlib.sha256(code.encode()).hexdigest()


def basic_analysis(problem: ProblemData) -> ProblemAnalysis:
    """Analysis built from scraped fields alone, without a generation call."""
    difficulty = (problem.difficulty or "medium").lower()
    return ProblemAnalysis(
        difficulty=difficulty,
        topics=problem.tags,
        patterns=['Click "Analyze Code" for AI insights'],
        estimated_time=ESTIMATED_MINUTES.get(difficulty, 30),
        prerequisites=[],
        summary='Problem extracted. Ask me questions or click "Get Hint" for guidance.',
    )


def summarize_evaluations(evaluations: Sequence[Evaluation]) -> InterviewSummary:
    """Average score and coarse strengths/improvements from recorded rounds."""
    if not evaluations:
        return InterviewSummary(
            improvements=["Complete more questions for detailed feedback"]
        )

    count = len(evaluations)
    average = round(sum(e.score for e in evaluations) / count)
    clarity = round(sum(e.clarity for e in evaluations) / count)
    depth = round(sum(e.technical_depth for e in evaluations) / count)

    strengths: List[str] = []
    improvements: List[str] = []
    if clarity >= 70:
        strengths.append("Excellent communication skills")
    elif clarity < 50:
        improvements.append("Work on explaining thoughts more clearly")
    if depth >= 70:
        strengths.append("Strong technical knowledge")
    elif depth < 50:
        improvements.append("Strengthen technical fundamentals")
    if average >= 70:
        strengths.append("Interview-ready performance")
    elif average < 50:
        improvements.append("Needs more interview practice")

    return InterviewSummary(
        average_score=average,
        total_questions=count,
        strengths=strengths,
        improvements=improvements,
    )


def _conversation_block(history: Sequence[ChatMessage]) -> str:
    if not history:
        return ""
    lines = [
        f"{'Student' if msg.role == 'user' else 'Mentor'}: {msg.message}"
        for msg in history
    ]
    return "\nPrevious conversation:\n" + "\n".join(lines) + "\n"


class TutorService:
    """Service for mentor interactions that never reveal solutions."""

    def __init__(self, client: GenerationClient):
        self.client = client

    async def generate_hint(
        self,
        problem: Problem,
        request: HintRequestData,
        previous_hints: int,
        mode: Mode,
    ) -> Hint:
        """Generate a guiding hint or conversational reply."""
        system_instruction = prompts.NO_SOLUTION_RULE
        if request.action_type == "hint":
            template = (
                prompts.INTERVIEW_HINT if mode == Mode.interview else prompts.PRACTICE_HINT
            )
            system_instruction += (
                "\n\nThe user specifically requested a hint. Guide them with "
                "Socratic questions about the approach."
            )
        elif request.action_type == "chat":
            template = prompts.CHAT_HINT
            system_instruction += (
                "\n\nThis is a conversational exchange. Respond naturally to what "
                "the student asked, considering previous messages."
            )
        else:
            template = prompts.PRACTICE_HINT

        prompt = build(
            template,
            {
                "problem_title": problem.title,
                "problem_description": problem.description,
                "user_code": request.user_code or "No code yet",
                "user_question": request.user_question,
                "previous_hints_count": previous_hints,
                "hint_level": request.hint_level,
                "conversation": _conversation_block(request.conversation_history),
            },
        )
        result = await self.client.generate(
            prompt,
            GenerationOptions(temperature=0.7, system_instruction=system_instruction),
        )
        metadata = result.metadata or {}
        default_type = "conversation" if request.action_type == "chat" else "guiding_question"
        return Hint(
            question=result.text,
            type=metadata.get("hintType") or default_type,
            follow_up=metadata.get("followUp"),
        )

    async def analyze_code(
        self, problem: Problem, code: str, language: str, mode: Mode
    ) -> CodeAnalysis:
        """Reasoning-focused feedback on a code attempt."""
        prompt = build(
            prompts.ANALYZE_CODE,
            {
                "problem_title": problem.title,
                "problem_description": problem.description,
                "language": language,
                "code": code,
                "mode": mode.value,
            },
        )
        result = await self.client.generate(
            prompt,
            GenerationOptions(
                temperature=0.4, system_instruction=prompts.EXPLAIN_WHY_NOT_HOW
            ),
        )
        metadata = result.metadata or {}
        complexity = metadata.get("complexity")
        return CodeAnalysis(
            reasoning=result.text,
            complexity=complexity if isinstance(complexity, dict) else None,
            approach=metadata.get("approach"),
            considerations=_strings(metadata.get("considerations")),
            questions=_strings(metadata.get("questions")),
        )

    async def explain_concept(
        self, concept: str, video_context: Optional[str] = None
    ) -> ConceptExplanation:
        """Explain a concept with mental models and analogies."""
        prompt = build(
            prompts.EXPLAIN_CONCEPT,
            {
                "concept": concept,
                "video_context": video_context or "",
                "style": "mental_model",
            },
        )
        result = await self.client.generate(prompt, GenerationOptions(temperature=0.7))
        metadata = result.metadata or {}
        return ConceptExplanation(
            simple_explanation=result.text,
            mental_model=metadata.get("mentalModel"),
            analogy=metadata.get("analogy"),
            when_to_use=metadata.get("whenToUse"),
            common_mistakes=_strings(metadata.get("commonMistakes")),
        )

    async def find_related_problems(
        self, concept: str, difficulty: str = "easy"
    ) -> List[Dict[str, Any]]:
        prompt = build(
            prompts.RELATED_PROBLEMS, {"concept": concept, "difficulty": difficulty}
        )
        result = await self.client.generate(prompt, GenerationOptions(temperature=0.4))
        problems = (result.metadata or {}).get("problems")
        if not isinstance(problems, list):
            return []
        return [p for p in problems if isinstance(p, dict)]

    async def generate_recommendations(
        self, user_stats: Dict[str, Any], user_profile: Dict[str, Any]
    ) -> Recommendations:
        """Personalized study plan focused on weak areas."""
        prompt = build(
            prompts.RECOMMENDATIONS,
            {
                "solved_count": user_stats.get("solvedCount", 0),
                "weak_topics": ", ".join(_strings(user_stats.get("weakTopics"))),
                "strong_topics": ", ".join(_strings(user_stats.get("strongTopics"))),
                "avg_interview_score": user_stats.get("avgInterviewScore", 0),
                "focus": "weak_areas",
                "user_profile": user_profile,
            },
        )
        result = await self.client.generate(prompt, GenerationOptions(temperature=0.6))
        metadata = result.metadata or {}
        problems = metadata.get("problems")
        weeks = metadata.get("estimatedTime")
        return Recommendations(
            problems=[p for p in problems if isinstance(p, dict)]
            if isinstance(problems, list)
            else [],
            topics=_strings(metadata.get("topics")),
            study_plan=result.text,
            estimated_time_weeks=weeks if isinstance(weeks, int) and weeks > 0 else 4,
        )


def require_problem(problem: Optional[Problem]) -> Problem:
    if problem is None or not problem.title or problem.title == "Unknown Problem":
        raise errors.ValidationError(
            'Problem not detected. Please click "Extract Problem" first, '
            "or refresh the page if you just loaded it."
        )
    return problem


def _strings(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None]
