from datetime import datetime, timedelta, timezone

import pytest

from cognify.schemas.interview import (
    Continue,
    End,
    Evaluation,
    InterviewPhase,
    InterviewState,
    InterviewTurn,
)
from cognify.services.interview import advance, average_quality

START = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)
ORDER = [
    InterviewPhase.problem_understanding,
    InterviewPhase.coding,
    InterviewPhase.optimization,
    InterviewPhase.edge_cases,
]


def make_interview(phase=InterviewPhase.problem_understanding, scores=(), budget_minutes=45):
    return InterviewState(
        interviewer_id="interviewer_1",
        start_time=START,
        duration_budget_ms=budget_minutes * 60 * 1000,
        current_phase=phase,
        questions=[InterviewTurn(user_response=f"answer {i}") for i in range(len(scores))],
        evaluations=[Evaluation(score=s) for s in scores],
    )


def test_phase_order_and_ranks():
    assert [phase.next() for phase in ORDER] == ORDER[1:] + [None]
    assert [phase.rank for phase in ORDER] == [0, 1, 2, 3]
    assert InterviewPhase.edge_cases.is_terminal
    assert not InterviewPhase.optimization.is_terminal


def test_high_quality_advances_exactly_one_phase():
    interview = make_interview(scores=(95, 95, 95))

    progression = advance(interview, now=START + timedelta(minutes=5))

    assert progression == Continue(phase=InterviewPhase.coding)


def test_needs_minimum_questions_before_advancing():
    interview = make_interview(scores=(100,))

    progression = advance(interview, now=START + timedelta(minutes=1))

    assert progression == Continue(phase=InterviewPhase.problem_understanding)


def test_threshold_is_strict():
    interview = make_interview(scores=(70, 70))
    progression = advance(interview, now=START + timedelta(minutes=1))
    assert progression.phase is InterviewPhase.problem_understanding


def test_only_recent_evaluations_count():
    interview = make_interview(scores=(10, 10, 90, 90, 90))
    assert average_quality(interview.evaluations, recent=3) == 90
    assert isinstance(advance(interview, now=START), Continue)
    assert advance(interview, now=START).phase is InterviewPhase.coding


def test_average_quality_neutral_without_evaluations():
    assert average_quality([]) == 50.0


def test_timeout_dominates_quality():
    interview = make_interview(scores=(100, 100, 100), budget_minutes=1)

    progression = advance(interview, now=START + timedelta(minutes=1, milliseconds=1))

    assert isinstance(progression, End)


def test_elapsed_equal_to_budget_is_not_timeout():
    interview = make_interview(scores=(20, 20), budget_minutes=1)
    progression = advance(interview, now=START + timedelta(minutes=1))
    assert progression == Continue(phase=InterviewPhase.problem_understanding)


def test_terminal_phase_stays_put():
    interview = make_interview(phase=InterviewPhase.edge_cases, scores=(99, 99, 99))
    progression = advance(interview, now=START + timedelta(minutes=10))
    assert progression == Continue(phase=InterviewPhase.edge_cases)


@pytest.mark.parametrize("scores", [(0, 0), (50, 60, 70), (71, 90, 100), (100,) * 6])
def test_phase_rank_never_decreases_nor_skips(scores):
    for phase in ORDER:
        interview = make_interview(phase=phase, scores=scores)
        progression = advance(interview, now=START + timedelta(minutes=2))
        assert isinstance(progression, Continue)
        assert progression.phase.rank - phase.rank in (0, 1)
