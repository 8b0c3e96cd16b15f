"""
Rate Calculator

Maps a slot hour to its hourly price under a day/night rate schedule.
Pure functions of their inputs; no database access.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List

from shared.domain.base import ValueObject
from shared.domain.value_objects import HOURS_PER_DAY

CENTS = Decimal("0.01")


@dataclass(frozen=True)
class NightWindow(ValueObject):
    """
    Night rate window

    ``start_hour`` is inclusive, ``end_hour`` exclusive. When start is
    greater than end the window wraps past midnight (17 -> 7 covers
    17:00-06:59). Equal bounds describe an empty window.
    """
    start_hour: int
    end_hour: int

    def contains(self, hour: int) -> bool:
        if self.start_hour > self.end_hour:
            return hour >= self.start_hour or hour < self.end_hour
        return self.start_hour <= hour < self.end_hour


@dataclass(frozen=True)
class RateSchedule(ValueObject):
    """Snapshot of the rate settings used for one pricing decision."""
    day_rate: Decimal
    night_rate: Decimal
    night_window: NightWindow

    @classmethod
    def from_settings(cls, settings) -> "RateSchedule":
        """Build from any object exposing the RateSettings attributes."""
        return cls(
            day_rate=Decimal(settings.day_rate),
            night_rate=Decimal(settings.night_rate),
            night_window=NightWindow(int(settings.night_start_hour), int(settings.night_end_hour)),
        )


@dataclass(frozen=True)
class HourlyRate(ValueObject):
    hour: int
    amount: Decimal
    is_night_rate: bool


def rate_for(hour: int, schedule: RateSchedule) -> HourlyRate:
    """Price of one slot hour under ``schedule``."""
    if not 0 <= hour < HOURS_PER_DAY:
        raise ValueError(f"hour must be within 0-23, got {hour}")
    is_night = schedule.night_window.contains(hour)
    amount = schedule.night_rate if is_night else schedule.day_rate
    return HourlyRate(hour=hour, amount=amount.quantize(CENTS), is_night_rate=is_night)


def price_hours(hours: Iterable[int], schedule: RateSchedule) -> List[HourlyRate]:
    return [rate_for(hour, schedule) for hour in hours]


def total_price(rates: Iterable[HourlyRate]) -> Decimal:
    return sum((rate.amount for rate in rates), Decimal("0.00")).quantize(CENTS)
