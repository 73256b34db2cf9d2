"""
Data models for Trip Splitter
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class Currency(str, Enum):
    """Currencies an activity cost can be recorded in"""
    USD = "USD"
    CAD = "CAD"

    @classmethod
    def parse(cls, value: Optional[str], default: Optional["Currency"] = None) -> "Currency":
        """Parse a currency code, falling back to default (CAD) when unknown"""
        if default is None:
            default = cls.CAD
        code = (value or "").strip().upper()
        try:
            return cls(code)
        except ValueError:
            return default


@dataclass(frozen=True)
class Family:
    """A group billed and credited as a single unit"""
    id: str
    name: str


@dataclass(frozen=True)
class Participant:
    """Head count of one family taking part in an activity"""
    family_id: str
    count: int


@dataclass(frozen=True)
class Activity:
    """One shared expense"""
    id: str
    name: str
    cost: float  # in the original currency
    currency: Currency
    paid_by: str  # family id
    date: str  # YYYY-MM-DD
    participants: List[Participant] = field(default_factory=list)

    def participant_count(self, family_id: str) -> int:
        for p in self.participants:
            if p.family_id == family_id:
                return p.count
        return 0


@dataclass(frozen=True)
class ExpenseResult:
    """Balance of one family, in canonical currency"""
    family_id: str
    family_name: str
    total_paid: float
    total_owed: float

    @property
    def net_amount(self) -> float:
        # positive -> should receive; negative -> should pay
        return self.total_paid - self.total_owed


@dataclass
class Trip:
    """Complete trip data as saved to disk"""
    families: List[Family]
    activities: List[Activity]
    version: str = "1.0"
