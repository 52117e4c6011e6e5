"""
Type-safe data models for the bot
Uses dataclasses and enums for better type safety and IDE support
"""
from dataclasses import dataclass, field
from datetime import date
from enum import Enum, IntEnum
from types import MappingProxyType
from typing import Mapping


class Weekday(IntEnum):
    """Matches datetime.weekday() numbering"""
    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @property
    def is_weekend(self) -> bool:
        return self in (Weekday.SATURDAY, Weekday.SUNDAY)


class DiningHall(Enum):
    """The four dining commons, in report order"""
    BERK = ("Berk", "berkshire")
    HAMP = ("Hamp", "hampshire")
    FRANK = ("Frank", "franklin")
    WORCESTER = ("Worcester", "worcester")

    def __init__(self, label: str, code: str):
        self.label = label
        self.code = code


class Meal(Enum):
    """Meal periods and the page anchor of each one's section"""
    BREAKFAST = ("Breakfast", "breakfast_menu")
    LUNCH = ("Lunch", "lunch_menu")
    DINNER = ("Dinner", "dinner_menu")
    LATE_NIGHT = ("Late Night", "latenight_menu")
    GRAB_AND_GO = ("Grab n' Go", "grabngo")

    def __init__(self, label: str, anchor: str):
        self.label = label
        self.anchor = anchor

    def display_name(self, weekday: Weekday) -> str:
        """Lunch is served as brunch on weekends"""
        if self is Meal.LUNCH and weekday.is_weekend:
            return "Brunch"
        return self.label


@dataclass(frozen=True)
class MenuSnapshot:
    """Raw menu pages for every dining hall, fetched on one calendar date"""
    fetched_on: date
    documents: Mapping[DiningHall, str] = field(default_factory=dict)

    def __post_init__(self):
        missing = [hall.label for hall in DiningHall if hall not in self.documents]
        if missing:
            raise ValueError(f"Snapshot is missing documents for: {', '.join(missing)}")
        # Read-only view so the snapshot can't be patched in place
        object.__setattr__(self, "documents", MappingProxyType(dict(self.documents)))

    def document(self, hall: DiningHall) -> str:
        return self.documents[hall]
