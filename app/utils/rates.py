"""
Session rate table
Splits the full session rate between teacher and company
"""

import math
from dataclasses import dataclass
from typing import Dict, Union

from app.utils.errors import InvalidDuration

HOURLY_RATE = 125
HOURLY_TEACHER_SHARE = 100
HALF_HOUR_RATE = 63
HALF_HOUR_TEACHER_SHARE = 50

CANONICAL_DURATIONS = (0.5, 1.0, 1.5, 2.0)

# Legacy duration labels still found on older booking documents
DURATION_LABELS = {
    '30 minutes': 0.5,
    '1 hour': 1.0,
    '1.5 hours': 1.5,
    '2 hours': 2.0,
}


@dataclass(frozen=True)
class SessionRate:
    """Full rate of one session and its teacher/company split"""
    duration: float
    total_rate: int
    teacher_share: int
    company_share: int

    def to_dict(self) -> dict:
        return {
            'duration': self.duration,
            'total_rate': self.total_rate,
            'teacher_share': self.teacher_share,
            'company_share': self.company_share
        }


def calculate_rate(duration: float) -> SessionRate:
    """
    Compute the rate for any non-negative duration in hours.

    Whole hours are billed at the hourly rate; a remaining fraction of at
    least half an hour adds one half-hour block. Anything smaller is free.
    """
    if duration is None or duration < 0:
        raise InvalidDuration(duration)

    whole_hours = math.floor(duration)
    has_half_block = (duration - whole_hours) >= 0.5

    total_rate = whole_hours * HOURLY_RATE + (HALF_HOUR_RATE if has_half_block else 0)
    teacher_share = whole_hours * HOURLY_TEACHER_SHARE + (HALF_HOUR_TEACHER_SHARE if has_half_block else 0)

    return SessionRate(
        duration=float(duration),
        total_rate=total_rate,
        teacher_share=teacher_share,
        company_share=total_rate - teacher_share
    )


RATE_TABLE: Dict[float, SessionRate] = {d: calculate_rate(d) for d in CANONICAL_DURATIONS}

_PUBLISHED_RATES = {
    0.5: (63, 50, 13),
    1.0: (125, 100, 25),
    1.5: (188, 150, 38),
    2.0: (250, 200, 50),
}


def check_published_rates(table: Dict[float, SessionRate]):
    """Raise RuntimeError when the table disagrees with the published figures"""
    for duration, figures in _PUBLISHED_RATES.items():
        rate = table.get(duration)
        if rate is None or (rate.total_rate, rate.teacher_share, rate.company_share) != figures:
            raise RuntimeError(f"Rate formula drifted from the published rate table at {duration} hours")


check_published_rates(RATE_TABLE)


def parse_duration(value: Union[int, float, str, None]) -> float:
    """Normalize a duration given as a number, numeric string or legacy label"""
    if isinstance(value, bool) or value is None:
        raise InvalidDuration(value)

    if isinstance(value, str):
        label = value.strip().lower()
        if label in DURATION_LABELS:
            return DURATION_LABELS[label]
        try:
            value = float(label)
        except ValueError:
            raise InvalidDuration(value)

    duration = float(value)
    if duration not in RATE_TABLE:
        raise InvalidDuration(value)
    return duration


def get_rate(duration: Union[int, float, str]) -> SessionRate:
    """Strict lookup for the canonical durations (0.5, 1, 1.5 and 2 hours)"""
    return RATE_TABLE[parse_duration(duration)]
