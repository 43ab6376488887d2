"""Advisory hint budget."""

from datetime import datetime, timedelta
from typing import Iterable, Optional

from cognify.schemas.common import utcnow
from cognify.schemas.sessions import HintRecord, Mode

UNLIMITED = -1


def remaining_hints(
    hints: Iterable[HintRecord],
    mode: Mode,
    now: Optional[datetime] = None,
    window: timedelta = timedelta(minutes=15),
    budget: int = 3,
) -> int:
    """Hints left in the current window.

    Practice and learning modes are not capped and report UNLIMITED. The value
    is advisory: callers decide what to do when it reaches zero.
    """
    if mode != Mode.interview:
        return UNLIMITED

    now = now or utcnow()
    recent = sum(1 for hint in hints if now - hint.timestamp < window)
    return max(0, budget - recent)
