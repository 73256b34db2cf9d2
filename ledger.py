"""
Editing operations on the family and activity lists.

Every function takes the current lists and returns new ones; inputs are
never mutated, so callers can keep the previous snapshot around.
"""
from __future__ import annotations
import logging
import math
from typing import Dict, Iterable, List, Optional, Tuple

from errors import InvalidActivityError, TripSplitterError, UnknownFamilyError
from models import Activity, Currency, Family, Participant
from utils import new_id, today_str

logger = logging.getLogger(__name__)


def _clean_name(name: str, what: str, error=InvalidActivityError) -> str:
    name = (name or "").strip()
    if not name:
        raise error(f"{what} name is required")
    return name


def add_family(families: List[Family], name: str) -> Tuple[List[Family], Family]:
    """Append a new family; returns the new list and the created family"""
    family = Family(id=new_id(), name=_clean_name(name, "Family", TripSplitterError))
    return families + [family], family


def rename_family(families: List[Family], family_id: str, name: str) -> List[Family]:
    name = _clean_name(name, "Family", TripSplitterError)
    if all(f.id != family_id for f in families):
        raise UnknownFamilyError(family_id)
    return [Family(f.id, name) if f.id == family_id else f for f in families]


def remove_family(
    families: List[Family],
    activities: List[Activity],
    family_id: str,
) -> Tuple[List[Family], List[Activity]]:
    """
    Remove a family and everything that depends on it.

    Activities the family paid for are dropped. The family's participant
    entries are removed from the remaining activities, and any activity
    left without participants is dropped too.
    """
    if all(f.id != family_id for f in families):
        raise UnknownFamilyError(family_id)

    kept = []
    for a in activities:
        if a.paid_by == family_id:
            continue
        participants = [p for p in a.participants if p.family_id != family_id]
        if not participants:
            logger.info("Dropping activity %r: no participants left", a.name)
            continue
        if len(participants) != len(a.participants):
            a = Activity(a.id, a.name, a.cost, a.currency, a.paid_by, a.date, participants)
        kept.append(a)

    dropped = len(activities) - len(kept)
    if dropped:
        logger.info("Removed family %s and %d activities", family_id, dropped)
    return [f for f in families if f.id != family_id], kept


def normalize_participants(participants: Iterable[Participant]) -> List[Participant]:
    """Merge entries for the same family and drop zero or negative counts"""
    counts: Dict[str, int] = {}
    for p in participants:
        count = int(p.count)
        if count > 0:
            counts[p.family_id] = counts.get(p.family_id, 0) + count
    return [Participant(family_id, count) for family_id, count in counts.items()]


def make_activity(
    name: str,
    cost: float,
    currency: Currency,
    paid_by: str,
    participants: Iterable[Participant],
    date: Optional[str] = None,
    activity_id: Optional[str] = None,
) -> Activity:
    """
    Build a validated activity.
    Raises InvalidActivityError when a required field is missing or invalid.
    """
    name = _clean_name(name, "Activity")
    try:
        cost = float(cost)
    except (TypeError, ValueError):
        raise InvalidActivityError(f"Invalid cost: {cost!r}")
    if not math.isfinite(cost) or cost < 0:
        raise InvalidActivityError(f"Cost must be a non-negative number, got {cost}")
    try:
        currency = Currency(currency)
    except ValueError:
        raise InvalidActivityError(f"Unsupported currency: {currency!r}")
    if not paid_by:
        raise InvalidActivityError("Payer is required")

    people = normalize_participants(participants)
    if not people:
        raise InvalidActivityError("At least one participant is required")

    return Activity(
        id=activity_id or new_id(),
        name=name,
        cost=cost,
        currency=currency,
        paid_by=paid_by,
        date=date or today_str(),
        participants=people,
    )


def replace_activity(activities: List[Activity], activity: Activity) -> List[Activity]:
    """Swap in an edited activity with the same id"""
    if all(a.id != activity.id for a in activities):
        raise InvalidActivityError(f"Unknown activity: {activity.id}")
    return [activity if a.id == activity.id else a for a in activities]


def remove_activity(activities: List[Activity], activity_id: str) -> List[Activity]:
    return [a for a in activities if a.id != activity_id]
