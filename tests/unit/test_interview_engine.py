from datetime import timedelta

import pytest

from cognify import errors
from cognify.schemas.interview import InterviewPhase
from cognify.schemas.sessions import Problem, Session

GOOD = {
    "score": 92,
    "clarity": 88,
    "confidence": 90,
    "technicalDepth": 85,
    "strengths": ["clear constraints"],
    "weaknesses": ["skipped edge cases"],
}


@pytest.fixture
def session():
    return Session(current_problem=Problem(platform="leetcode", title="Two Sum"))


@pytest.mark.asyncio
async def test_start_requires_problem(interviews):
    with pytest.raises(errors.ValidationError):
        await interviews.start(Session())


@pytest.mark.asyncio
async def test_start_opens_interview(interviews, backend, session):
    backend.reply("Can you restate the problem in your own words?")

    interview, question = await interviews.start(session, duration_ms=60_000)

    assert session.interview is interview
    assert interview.current_phase is InterviewPhase.problem_understanding
    assert interview.duration_budget_ms == 60_000
    assert question == "Can you restate the problem in your own words?"


@pytest.mark.asyncio
async def test_default_duration_from_settings(interviews, session, test_settings):
    interview, _ = await interviews.start(session)
    assert interview.duration_budget_ms == test_settings.interview_duration_minutes * 60_000


@pytest.mark.asyncio
async def test_turns_and_evaluations_stay_aligned(interviews, backend, session):
    await interviews.start(session)
    for _ in range(3):
        backend.reply("Solid reasoning.", GOOD)
        backend.reply("Next question?")
        await interviews.submit_turn(session, "my answer")

    interview = session.interview
    assert len(interview.questions) == len(interview.evaluations) == 3


@pytest.mark.asyncio
async def test_strong_answers_advance_one_phase(interviews, backend, session):
    await interviews.start(session)

    backend.reply("Good.", GOOD)
    backend.reply("What about the approach?")
    first = await interviews.submit_turn(session, "answer one")
    assert session.interview.current_phase is InterviewPhase.problem_understanding
    assert first.next_question == "What about the approach?"

    backend.reply("Good.", GOOD)
    backend.reply("Start coding.")
    second = await interviews.submit_turn(session, "answer two")

    assert session.interview.current_phase is InterviewPhase.coding
    assert second.evaluation.score == 92
    assert second.should_end is False
    # The next question is generated with the latest feedback
    assert "skipped edge cases" in backend.prompts[-1]


@pytest.mark.asyncio
async def test_missing_metadata_defaults_to_neutral(interviews, backend, session):
    await interviews.start(session)
    backend.reply("Hmm, tell me more.")

    outcome = await interviews.submit_turn(session, "answer")

    evaluation = outcome.evaluation
    assert (evaluation.score, evaluation.clarity, evaluation.confidence, evaluation.technical_depth) == (50, 50, 50, 50)
    assert evaluation.feedback_text == "Hmm, tell me more."


@pytest.mark.asyncio
async def test_scores_are_clamped(interviews, backend, session):
    await interviews.start(session)
    backend.reply("Wow.", {"score": 140, "clarity": -5, "confidence": "high"})

    outcome = await interviews.submit_turn(session, "answer")

    assert outcome.evaluation.score == 100
    assert outcome.evaluation.clarity == 0
    assert outcome.evaluation.confidence == 50


@pytest.mark.asyncio
async def test_timeout_ends_even_with_perfect_scores(interviews, backend, session):
    interview, _ = await interviews.start(session, duration_ms=1)
    backend.reply("Perfect.", {"score": 100})
    calls_before = len(backend.requests)

    outcome = await interviews.submit_turn(
        session, "answer", now=interview.start_time + timedelta(milliseconds=5)
    )

    assert outcome.should_end is True
    assert outcome.next_question is None
    # Only the evaluation call is made once the interview is over
    assert len(backend.requests) == calls_before + 1


@pytest.mark.asyncio
async def test_duplicate_turn_id_is_replayed(interviews, backend, session):
    await interviews.start(session)
    backend.reply("Good.", GOOD)
    backend.reply("Follow-up?")
    first = await interviews.submit_turn(session, "answer", turn_id="turn-1")
    calls = len(backend.requests)

    again = await interviews.submit_turn(session, "answer", turn_id="turn-1")

    assert again.to_wire() == first.to_wire()
    assert len(session.interview.questions) == 1
    assert len(backend.requests) == calls


@pytest.mark.asyncio
async def test_failed_evaluation_appends_nothing(interviews, backend, session):
    await interviews.start(session)
    backend.fail(500, "Internal error encountered.", "INTERNAL")

    with pytest.raises(errors.BackendError):
        await interviews.submit_turn(session, "answer")

    assert session.interview.questions == []
    assert session.interview.evaluations == []


@pytest.mark.asyncio
async def test_end_builds_report_and_closes(interviews, backend, session):
    await interviews.start(session)
    backend.reply(
        "Overall a solid session.",
        {
            "overallScore": 78,
            "problemSolving": 80,
            "communication": 75,
            "technicalSkill": 79,
            "strengths": ["communication"],
            "improvements": ["testing"],
            "readinessLevel": "intermediate",
            "nextSteps": ["practice graphs"],
        },
    )

    report = await interviews.end(session)

    assert report.overall_score == 78
    assert report.readiness_level.value == "intermediate"
    assert report.detailed_feedback == "Overall a solid session."
    assert session.interview.ended
    assert session.interview.total_duration_ms >= 0


@pytest.mark.asyncio
async def test_unknown_readiness_defaults_to_beginner(interviews, backend, session):
    await interviews.start(session)
    backend.reply("Report.", {"readinessLevel": "guru"})

    report = await interviews.end(session)

    assert report.readiness_level.value == "beginner"


@pytest.mark.asyncio
async def test_ended_interview_rejects_turns_and_second_end(interviews, session):
    await interviews.start(session)
    await interviews.end(session)

    with pytest.raises(errors.ValidationError):
        await interviews.submit_turn(session, "late answer")
    with pytest.raises(errors.ValidationError):
        await interviews.end(session)


@pytest.mark.asyncio
async def test_turn_without_interview(interviews, session):
    with pytest.raises(errors.ValidationError):
        await interviews.submit_turn(session, "answer")
