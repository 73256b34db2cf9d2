"""
Pytest configuration and shared fixtures
"""
import pytest

from models import Activity, Currency, Family, Participant


@pytest.fixture
def families():
    """Two families with stable ids."""
    return [Family(id="1", name="Smith"), Family(id="2", name="Lee")]


@pytest.fixture
def dinner():
    """CAD 100 paid by Smith, one person from each family."""
    return Activity(
        id="a1",
        name="Dinner",
        cost=100.0,
        currency=Currency.CAD,
        paid_by="1",
        date="2024-07-01",
        participants=[Participant("1", 1), Participant("2", 1)],
    )


@pytest.fixture
def trip_activities(dinner):
    """A mixed-currency set of activities for the two families."""
    return [
        dinner,
        Activity(
            id="a2",
            name="Kayak rental",
            cost=80.0,
            currency=Currency.USD,
            paid_by="2",
            date="2024-07-02",
            participants=[Participant("1", 3), Participant("2", 1)],
        ),
        Activity(
            id="a3",
            name="Groceries",
            cost=45.5,
            currency=Currency.CAD,
            paid_by="1",
            date="2024-07-03",
            participants=[Participant("2", 2)],
        ),
    ]
