from datetime import datetime
from typing import Callable

from healthtrack.services.identifiers import utcnow


def get_clock() -> Callable[[], datetime]:
    """Clock used for created_at / default dates; overridden in tests."""
    return utcnow
