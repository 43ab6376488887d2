"""Message router: the boundary between callers and the mentor core."""

import logging
from datetime import timedelta
from typing import Any, Awaitable, Callable, Dict, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as SchemaError

from cognify import errors
from cognify.clients.analytics import AnalyticsClient
from cognify.config import Settings, get_settings
from cognify.schemas.common import utcnow
from cognify.schemas.messages import (
    AnalyzeCodeData,
    EndInterviewData,
    ExplainConceptData,
    ExtractProblemData,
    HintRequestData,
    InterviewTurnData,
    ProblemSolvedData,
    RecommendationsData,
    RequestType,
    SetModeData,
    StartInterviewData,
    SyncProgressData,
)
from cognify.schemas.sessions import CodeIteration, HintRecord, Mode, Problem, Session
from cognify.services.credentials import CredentialStore
from cognify.services.hint_policy import remaining_hints
from cognify.services.interview import InterviewEngine
from cognify.services.sessions import SessionStore
from cognify.services.tutor import (
    TutorService,
    basic_analysis,
    code_hash,
    require_problem,
    summarize_evaluations,
)

logger = logging.getLogger(__name__)

Result = Dict[str, Any]
Handler = Callable[[str, Dict[str, Any], Optional[str]], Awaitable[Result]]
PayloadT = TypeVar("PayloadT", bound=BaseModel)

# Requests that read-modify-write the session for their conversation key.
SESSION_SCOPED = {
    RequestType.extract_problem,
    RequestType.request_hint,
    RequestType.analyze_code,
    RequestType.start_interview,
    RequestType.interview_question,
    RequestType.end_interview,
    RequestType.set_mode,
    RequestType.problem_solved,
}


def failure(message: str, code: str, **extra: Any) -> Result:
    return {"success": False, "error": message, "code": code, **extra}


class MessageRouter:
    """Dispatch typed requests for a conversation key and tag every result."""

    def __init__(
        self,
        store: SessionStore,
        tutor: TutorService,
        interviews: InterviewEngine,
        analytics: AnalyticsClient,
        credentials: CredentialStore,
        settings: Optional[Settings] = None,
    ):
        self.store = store
        self.tutor = tutor
        self.interviews = interviews
        self.analytics = analytics
        self.credentials = credentials
        self.settings = settings or get_settings()
        self._handlers: Dict[RequestType, Handler] = {
            RequestType.extract_problem: self._extract_problem,
            RequestType.request_hint: self._request_hint,
            RequestType.analyze_code: self._analyze_code,
            RequestType.start_interview: self._start_interview,
            RequestType.interview_question: self._interview_question,
            RequestType.end_interview: self._end_interview,
            RequestType.explain_concept: self._explain_concept,
            RequestType.sync_progress: self._sync_progress,
            RequestType.get_recommendations: self._get_recommendations,
            RequestType.set_mode: self._set_mode,
            RequestType.problem_solved: self._problem_solved,
        }

    async def dispatch(
        self,
        request_type: str,
        data: Optional[Dict[str, Any]],
        key: str,
        user_id: Optional[str] = None,
    ) -> Result:
        """Handle one request. Never raises."""
        try:
            rtype = RequestType(request_type)
        except ValueError:
            return failure(
                f"Unrecognized request type: {request_type}", "UNRECOGNIZED_REQUEST"
            )

        handler = self._handlers[rtype]
        logger.info("Dispatching %s for %s", rtype.value, key)
        try:
            if rtype in SESSION_SCOPED:
                async with self.store.lock(key):
                    result = await handler(key, data or {}, user_id)
            else:
                result = await handler(key, data or {}, user_id)
        except errors.RateLimitExceeded as exc:
            return failure(exc.message, exc.code, retryAfter=round(exc.retry_after, 1))
        except errors.BackendError as exc:
            return failure(exc.message, exc.code, reason=exc.reason.value)
        except errors.CognifyError as exc:
            return failure(exc.message, exc.code)
        except httpx.HTTPError as exc:
            logger.warning("Analytics sink request failed for %s: %s", rtype.value, exc)
            return failure(
                "Unable to reach the progress service. Please try again.",
                "SYNC_FAILED",
            )
        except Exception:
            logger.exception("Unhandled error while handling %s", rtype.value)
            return failure("Something went wrong. Please try again.", "INTERNAL_ERROR")

        return {"success": True, **result}

    async def _load(self, key: str) -> Session:
        if not self.store.contains(key):
            await self.store.recover(key)
        return self.store.get(key)

    @staticmethod
    def _parse(model: Type[PayloadT], rtype: RequestType, data: Dict[str, Any]) -> PayloadT:
        try:
            return model.model_validate(data)
        except SchemaError as exc:
            first = exc.errors()[0]
            field = ".".join(str(part) for part in first["loc"]) or "data"
            raise errors.ValidationError(
                f"Invalid {rtype.value} request: {field}: {first['msg']}"
            ) from exc

    async def _publish(
        self, user_id: Optional[str], action: Callable[[str], Awaitable[Any]]
    ) -> None:
        """Best-effort write to the analytics sink for a signed-in user."""
        if not user_id:
            return
        try:
            await action(user_id)
        except httpx.HTTPError as exc:
            logger.warning("Analytics sink write failed for %s: %s", user_id, exc)

    @staticmethod
    def _require_user(user_id: Optional[str]) -> str:
        if not user_id:
            raise errors.NotAuthenticated()
        return user_id

    async def _extract_problem(
        self, key: str, data: Dict[str, Any], user_id: Optional[str]
    ) -> Result:
        payload = self._parse(ExtractProblemData, RequestType.extract_problem, data)
        session = await self._load(key)
        scraped = payload.problem_data
        session.current_problem = Problem(
            platform=payload.platform,
            title=scraped.title,
            difficulty=scraped.difficulty,
            description=scraped.description,
            constraints=scraped.constraints,
            examples=scraped.examples,
            tags=scraped.tags,
        )
        await self.store.save(key, session)
        return {
            "problem": session.current_problem.to_wire(),
            "analysis": basic_analysis(scraped).to_wire(),
        }

    async def _request_hint(
        self, key: str, data: Dict[str, Any], user_id: Optional[str]
    ) -> Result:
        payload = self._parse(HintRequestData, RequestType.request_hint, data)
        if not self.credentials.configured:
            raise errors.NotConfigured()

        session = await self._load(key)
        problem = require_problem(session.current_problem)
        session.hints.append(
            HintRecord(
                question=payload.user_question,
                action_type=payload.action_type,
                code_snapshot=(payload.user_code or "")[
                    : self.settings.hint_snapshot_chars
                ]
                or None,
            )
        )
        hint = await self.tutor.generate_hint(
            problem, payload, len(session.hints), session.mode
        )
        await self.store.save(key, session)

        await self._publish(
            user_id,
            lambda uid: self.analytics.log_interaction(
                uid,
                {
                    "type": "hint_request",
                    "problemId": problem.title,
                    "actionType": payload.action_type,
                    "timestamp": utcnow().isoformat(),
                },
            ),
        )
        return {
            "hint": hint.to_wire(),
            "remainingHints": remaining_hints(
                session.hints,
                session.mode,
                window=timedelta(minutes=self.settings.hint_window_minutes),
                budget=self.settings.interview_hint_budget,
            ),
        }

    async def _analyze_code(
        self, key: str, data: Dict[str, Any], user_id: Optional[str]
    ) -> Result:
        payload = self._parse(AnalyzeCodeData, RequestType.analyze_code, data)
        session = await self._load(key)
        problem = require_problem(session.current_problem)

        analysis = await self.tutor.analyze_code(
            problem, payload.code, payload.language, session.mode
        )
        session.code_iterations.append(
            CodeIteration(
                code_hash=code_hash(payload.code),
                feedback_summary=analysis.reasoning[:200],
            )
        )
        await self.store.save(key, session)
        return {"analysis": analysis.to_wire()}

    async def _start_interview(
        self, key: str, data: Dict[str, Any], user_id: Optional[str]
    ) -> Result:
        payload = self._parse(StartInterviewData, RequestType.start_interview, data)
        session = await self._load(key)
        interview, first_question = await self.interviews.start(
            session, payload.duration
        )
        session.mode = Mode.interview
        await self.store.save(key, session)
        return {
            "interviewSession": interview.to_wire(),
            "firstQuestion": first_question,
        }

    async def _interview_question(
        self, key: str, data: Dict[str, Any], user_id: Optional[str]
    ) -> Result:
        payload = self._parse(InterviewTurnData, RequestType.interview_question, data)
        session = await self._load(key)
        outcome = await self.interviews.submit_turn(
            session,
            payload.user_response,
            current_code=payload.current_code,
            turn_id=payload.turn_id,
        )
        await self.store.save(key, session)
        return outcome.to_wire()

    async def _end_interview(
        self, key: str, data: Dict[str, Any], user_id: Optional[str]
    ) -> Result:
        self._parse(EndInterviewData, RequestType.end_interview, data)
        session = await self._load(key)
        report = await self.interviews.end(session)
        await self.store.save(key, session)

        interview = session.interview
        problem = session.current_problem
        await self._publish(
            user_id,
            lambda uid: self.analytics.save_interview_report(
                uid,
                {
                    "problemId": problem.title if problem else None,
                    "platform": problem.platform if problem else None,
                    "report": report.to_wire(),
                    "duration": interview.total_duration_ms if interview else None,
                    "timestamp": interview.end_time.isoformat()
                    if interview and interview.end_time
                    else None,
                },
            ),
        )
        return {"report": report.to_wire()}

    async def _explain_concept(
        self, key: str, data: Dict[str, Any], user_id: Optional[str]
    ) -> Result:
        payload = self._parse(ExplainConceptData, RequestType.explain_concept, data)
        explanation = await self.tutor.explain_concept(
            payload.concept, payload.video_context
        )
        related = await self.tutor.find_related_problems(payload.concept, "easy")
        return {"explanation": explanation.to_wire(), "relatedProblems": related}

    async def _sync_progress(
        self, key: str, data: Dict[str, Any], user_id: Optional[str]
    ) -> Result:
        payload = self._parse(SyncProgressData, RequestType.sync_progress, data)
        uid = self._require_user(user_id)
        await self.analytics.sync_progress(uid, payload.progress_data)
        return {}

    async def _get_recommendations(
        self, key: str, data: Dict[str, Any], user_id: Optional[str]
    ) -> Result:
        payload = self._parse(
            RecommendationsData, RequestType.get_recommendations, data
        )
        uid = self._require_user(user_id)
        stats = await self.analytics.get_user_stats(uid)
        recommendations = await self.tutor.generate_recommendations(
            stats, payload.user_profile
        )
        return {"recommendations": recommendations.to_wire()}

    async def _set_mode(
        self, key: str, data: Dict[str, Any], user_id: Optional[str]
    ) -> Result:
        payload = self._parse(SetModeData, RequestType.set_mode, data)
        session = await self._load(key)
        session.mode = payload.mode
        await self.store.save(key, session)
        return {"mode": session.mode.value}

    async def _problem_solved(
        self, key: str, data: Dict[str, Any], user_id: Optional[str]
    ) -> Result:
        payload = self._parse(ProblemSolvedData, RequestType.problem_solved, data)
        session = await self._load(key)
        problem = session.current_problem
        solved = payload.problem_data

        summary = None
        if session.interview is not None:
            summary = summarize_evaluations(session.interview.evaluations)

        record = {
            **solved,
            "mode": session.mode.value,
            "timeSpent": payload.session_data.get("timeSpent", 0),
            "attempts": payload.session_data.get("attempts", 1),
            "hintsUsed": len(session.hints),
            "codeAnalyses": len(session.code_iterations),
            "platform": solved.get("platform")
            or (problem.platform if problem else "leetcode"),
            "tags": (problem.tags if problem else None) or solved.get("tags", []),
        }
        if summary is not None:
            record["interviewSummary"] = summary.to_wire()

        await self._publish(
            user_id, lambda uid: self.analytics.log_problem_solved(uid, record)
        )
        await self.store.remove(key)

        result: Result = {
            "message": "Interview completed! Scores saved to dashboard."
            if summary is not None
            else "Problem logged to dashboard!"
        }
        if summary is not None:
            result["summary"] = summary.to_wire()
        return result
