from datetime import datetime, timedelta, timezone

import pytest

from cognify.schemas.sessions import HintRecord, Mode
from cognify.services.hint_policy import UNLIMITED, remaining_hints

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def hints_at(*minutes_ago: float):
    return [HintRecord(timestamp=NOW - timedelta(minutes=m)) for m in minutes_ago]


@pytest.mark.parametrize("mode", [Mode.practice, Mode.learning])
def test_non_interview_modes_are_unlimited(mode):
    assert remaining_hints(hints_at(1, 2, 3, 4, 5), mode, now=NOW) == UNLIMITED


def test_interview_budget_starts_full():
    assert remaining_hints([], Mode.interview, now=NOW) == 3


def test_three_recent_hints_exhaust_interview_budget():
    # Three hints over the last ten minutes
    hints = hints_at(10, 5, 0)
    assert remaining_hints(hints, Mode.interview, now=NOW) == 0


def test_hints_outside_window_do_not_count():
    hints = hints_at(16, 20, 3)
    assert remaining_hints(hints, Mode.interview, now=NOW) == 2


def test_budget_never_negative():
    hints = hints_at(*range(10))
    assert remaining_hints(hints, Mode.interview, now=NOW) == 0


def test_custom_window_and_budget():
    hints = hints_at(1, 4)
    remaining = remaining_hints(
        hints, Mode.interview, now=NOW, window=timedelta(minutes=2), budget=5
    )
    assert remaining == 4


def test_result_within_bounds_for_any_history():
    for count in range(8):
        value = remaining_hints(hints_at(*[0.5] * count), Mode.interview, now=NOW)
        assert 0 <= value <= 3
