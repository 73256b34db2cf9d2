"""Tests for reconciliation and settlement computations."""
from datetime import date

import pytest

from computations import (
    activity_shares,
    compute_transfers,
    filter_activities_by_date,
    reconcile,
    total_participants,
)
from currency import CurrencyConverter
from models import Activity, Currency, ExpenseResult, Family, Participant


def _activity(cost, currency=Currency.CAD, paid_by="1", participants=None, date_str="2024-07-01"):
    if participants is None:
        participants = [Participant("1", 1), Participant("2", 1)]
    return Activity("x", "Thing", cost, currency, paid_by, date_str, participants)


class TestReconcile:
    """Test per-family paid/owed/net balances."""

    def test_even_split_cad(self, families, dinner):
        """CAD 100 paid by Smith, split one each."""
        smith, lee = reconcile(families, [dinner])

        assert (smith.family_name, smith.total_paid, smith.total_owed) == ("Smith", 100.0, 50.0)
        assert smith.net_amount == 50.0
        assert (lee.family_name, lee.total_paid, lee.total_owed) == ("Lee", 0.0, 50.0)
        assert lee.net_amount == -50.0

    def test_even_split_usd(self, families):
        """USD 100 becomes CAD 135 before splitting."""
        smith, lee = reconcile(families, [_activity(100.0, Currency.USD)])

        assert smith.total_paid == pytest.approx(135.0)
        assert smith.net_amount == pytest.approx(67.5)
        assert lee.net_amount == pytest.approx(-67.5)

    def test_weighted_by_head_count(self, families, trip_activities):
        """Shares follow per-family head counts across mixed currencies."""
        smith, lee = reconcile(families, trip_activities)

        assert smith.total_paid == pytest.approx(145.5)
        assert smith.total_owed == pytest.approx(50.0 + 81.0)
        assert lee.total_paid == pytest.approx(108.0)
        assert lee.total_owed == pytest.approx(50.0 + 27.0 + 45.5)
        assert smith.net_amount == pytest.approx(14.5)
        assert lee.net_amount == pytest.approx(-14.5)

    def test_money_is_conserved(self, families, trip_activities):
        """Net amounts sum to zero."""
        results = reconcile(families, trip_activities)
        assert sum(r.net_amount for r in results) == pytest.approx(0.0, abs=1e-9)

    def test_one_result_per_family_in_order(self, trip_activities):
        """Families without activities still get a zero result, in input order."""
        families = [Family("3", "Nguyen"), Family("2", "Lee"), Family("1", "Smith")]
        results = reconcile(families, trip_activities)

        assert [r.family_id for r in results] == ["3", "2", "1"]
        assert results[0] == ExpenseResult("3", "Nguyen", 0.0, 0.0)
        assert results[0].net_amount == 0.0

    def test_no_activities(self, families):
        results = reconcile(families, [])
        assert [(r.total_paid, r.total_owed) for r in results] == [(0.0, 0.0), (0.0, 0.0)]

    def test_zero_participants_owes_nothing(self, families):
        """An activity without head count adds to paid but not to owed."""
        smith, lee = reconcile(families, [_activity(40.0, participants=[])])

        assert smith.total_paid == 40.0
        assert smith.total_owed == 0.0
        assert lee.total_owed == 0.0

    def test_custom_converter(self, families):
        smith, _ = reconcile(families, [_activity(10.0, Currency.USD)], CurrencyConverter(usd_rate=2.0))
        assert smith.total_paid == 20.0

    def test_unknown_family_ids_are_ignored(self, families):
        activity = _activity(30.0, paid_by="99", participants=[Participant("99", 1), Participant("1", 2)])
        smith, lee = reconcile(families, [activity])

        assert smith.total_paid == 0.0
        assert smith.total_owed == pytest.approx(20.0)
        assert lee.total_owed == 0.0

    def test_inputs_not_mutated(self, families, trip_activities):
        before = (list(families), list(trip_activities))
        reconcile(families, trip_activities)
        assert (families, trip_activities) == before


class TestActivityShares:
    """Test per-activity shares."""

    def test_total_participants(self, trip_activities):
        assert [total_participants(a) for a in trip_activities] == [2, 4, 2]

    def test_shares(self, trip_activities):
        shares = activity_shares(trip_activities[1])
        assert shares["1"] == pytest.approx(81.0)
        assert shares["2"] == pytest.approx(27.0)

    def test_non_participants_absent(self, trip_activities):
        assert set(activity_shares(trip_activities[2])) == {"2"}

    def test_empty_activity(self):
        assert activity_shares(_activity(10.0, participants=[])) == {}


class TestFilterActivitiesByDate:
    """Test date window filtering."""

    def test_inclusive_range(self, trip_activities):
        out = filter_activities_by_date(trip_activities, date(2024, 7, 2), date(2024, 7, 3))
        assert [a.id for a in out] == ["a2", "a3"]

    def test_open_ended(self, trip_activities):
        assert len(filter_activities_by_date(trip_activities, None, None)) == 3
        assert [a.id for a in filter_activities_by_date(trip_activities, None, date(2024, 7, 1))] == ["a1"]


class TestComputeTransfers:
    """Test greedy settlement."""

    def test_single_transfer(self, families, dinner):
        transfers = compute_transfers(reconcile(families, [dinner]))
        assert transfers == [("Lee", "Smith", 50.0)]

    def test_multiple_parties(self):
        results = [
            ExpenseResult("1", "A", 100.0, 40.0),  # +60
            ExpenseResult("2", "B", 0.0, 50.0),  # -50
            ExpenseResult("3", "C", 0.0, 10.0),  # -10
        ]
        transfers = compute_transfers(results)

        assert transfers == [("B", "A", 50.0), ("C", "A", 10.0)]

    def test_settled(self):
        assert compute_transfers([ExpenseResult("1", "A", 10.0, 10.0)]) == []

    def test_equal_balances_keep_input_order(self):
        """Debtors owing the same amount pay in the order they were listed."""
        a = ExpenseResult("1", "A", 0.0, 25.0)
        b = ExpenseResult("2", "B", 0.0, 25.0)
        c = ExpenseResult("3", "C", 50.0, 0.0)

        assert compute_transfers([a, b, c]) == [("A", "C", 25.0), ("B", "C", 25.0)]
        assert compute_transfers([b, a, c]) == [("B", "C", 25.0), ("A", "C", 25.0)]

    def test_families_sharing_a_name(self):
        """Two families named Smith are settled separately."""
        results = [
            ExpenseResult("1", "Smith", 30.0, 0.0),
            ExpenseResult("2", "Smith", 30.0, 0.0),
            ExpenseResult("3", "Lee", 0.0, 60.0),
        ]
        assert compute_transfers(results) == [("Lee", "Smith", 30.0), ("Lee", "Smith", 30.0)]

    def test_transfers_balance_the_books(self, families, trip_activities):
        results = reconcile(families, trip_activities)
        (transfer,) = compute_transfers(results)
        assert transfer[:2] == ("Lee", "Smith")
        assert transfer[2] == pytest.approx(14.5)
