"""
Common Value Objects

Value objects used across the booking domain:
- HourSet: A validated, ordered set of slot hours on one calendar day
"""

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Tuple

from shared.domain.base import ValueObject
from shared.domain.exceptions import ValidationError

HOURS_PER_DAY = 24


@dataclass(frozen=True)
class HourSet(ValueObject):
    """
    Hour set value object

    Holds the distinct slot hours (0-23) of a booking or a reservation
    request, always sorted ascending. Construction fails with
    ``ValidationError`` for empty input, duplicates or out-of-range hours.
    """
    hours: Tuple[int, ...]

    def __post_init__(self):
        if not self.hours:
            raise ValidationError("At least one slot hour is required.", field="hours")
        for hour in self.hours:
            if isinstance(hour, bool) or not isinstance(hour, int):
                raise ValidationError(f"Slot hour {hour!r} is not an integer.", field="hours")
            if not 0 <= hour < HOURS_PER_DAY:
                raise ValidationError(f"Slot hour {hour} is outside 0-23.", field="hours")
        if len(set(self.hours)) != len(self.hours):
            raise ValidationError("Slot hours must not repeat.", field="hours")
        object.__setattr__(self, "hours", tuple(sorted(self.hours)))

    @classmethod
    def of(cls, hours: Iterable[int]) -> "HourSet":
        return cls(tuple(hours))

    def runs(self) -> List[Tuple[int, int]]:
        """
        Merge hours into maximal contiguous runs

        Returns ``(first_hour, end_hour)`` pairs where ``end_hour`` is
        exclusive, e.g. {9, 10, 11, 15} -> [(9, 12), (15, 16)].
        """
        runs: List[Tuple[int, int]] = []
        start = previous = self.hours[0]
        for hour in self.hours[1:]:
            if hour != previous + 1:
                runs.append((start, previous + 1))
                start = hour
            previous = hour
        runs.append((start, previous + 1))
        return runs

    @property
    def first(self) -> int:
        return self.hours[0]

    @property
    def last(self) -> int:
        return self.hours[-1]

    def __iter__(self) -> Iterator[int]:
        return iter(self.hours)

    def __len__(self) -> int:
        return len(self.hours)

    def __contains__(self, hour: object) -> bool:
        return hour in self.hours

    def __str__(self):
        return ", ".join(f"{hour:02d}:00" for hour in self.hours)
