"""Wire schemas for the message router."""

import enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from cognify.schemas.common import CamelModel
from cognify.schemas.sessions import Mode


class RequestType(str, enum.Enum):
    """Closed set of request types understood by the router."""

    extract_problem = "EXTRACT_PROBLEM"
    request_hint = "REQUEST_HINT"
    analyze_code = "ANALYZE_CODE"
    start_interview = "START_INTERVIEW"
    interview_question = "INTERVIEW_QUESTION"
    end_interview = "END_INTERVIEW"
    explain_concept = "EXPLAIN_CONCEPT"
    sync_progress = "SYNC_PROGRESS"
    get_recommendations = "GET_RECOMMENDATIONS"
    set_mode = "SET_MODE"
    problem_solved = "PROBLEM_SOLVED"


class MessageEnvelope(CamelModel):
    """Inbound request. `type` stays a plain string so unknown values reach the router."""

    type: str
    data: Dict[str, Any] = {}
    conversation_key: str = Field(min_length=1)


class ProblemData(CamelModel):
    title: str = Field(min_length=1)
    difficulty: Optional[str] = None
    description: str = ""
    constraints: str = ""
    examples: List[Any] = []
    tags: List[str] = []


class ExtractProblemData(CamelModel):
    platform: str
    problem_data: ProblemData


class ChatMessage(CamelModel):
    role: Literal["user", "assistant", "mentor"] = "user"
    message: str


class HintRequestData(CamelModel):
    user_code: Optional[str] = None
    user_question: str = ""
    conversation_history: List[ChatMessage] = []
    action_type: str = "chat"
    hint_level: str = "medium"


class AnalyzeCodeData(CamelModel):
    code: str
    language: str = "python"


class StartInterviewData(CamelModel):
    duration: Optional[int] = Field(default=None, gt=0)  # milliseconds


class InterviewTurnData(CamelModel):
    user_response: str
    current_code: Optional[str] = None
    turn_id: Optional[str] = None


class EndInterviewData(CamelModel):
    pass


class ExplainConceptData(CamelModel):
    concept: str = Field(min_length=1)
    video_context: Optional[str] = None


class SyncProgressData(CamelModel):
    progress_data: Dict[str, Any] = {}


class RecommendationsData(CamelModel):
    user_profile: Dict[str, Any] = {}


class SetModeData(CamelModel):
    mode: Mode


class ProblemSolvedData(CamelModel):
    problem_data: Dict[str, Any] = {}
    session_data: Dict[str, Any] = {}


class CredentialsUpdate(CamelModel):
    api_key: Optional[str] = None
    model: Optional[str] = None


class CredentialCheck(CamelModel):
    status: Literal["valid", "quota_exhausted", "invalid", "not_configured"]
    message: str
