"""
Business logic and computations for Trip Splitter
"""
from __future__ import annotations
from datetime import date
from typing import Dict, List, Optional, Tuple

from currency import DEFAULT_CONVERTER, CurrencyConverter
from models import Activity, ExpenseResult, Family
from utils import parse_date


def total_participants(activity: Activity) -> int:
    """Sum of head counts across all participating families"""
    return sum(p.count for p in activity.participants)


def activity_shares(
    activity: Activity,
    converter: CurrencyConverter = DEFAULT_CONVERTER,
) -> Dict[str, float]:
    """
    Canonical-currency share owed by each participating family.
    Activities with no head count owe nothing.
    """
    total = total_participants(activity)
    if total <= 0:
        return {}
    cost = converter.to_canonical(activity.cost, activity.currency)
    shares: Dict[str, float] = {}
    for p in activity.participants:
        if p.count > 0:
            shares[p.family_id] = shares.get(p.family_id, 0.0) + cost * p.count / total
    return shares


def reconcile(
    families: List[Family],
    activities: List[Activity],
    converter: CurrencyConverter = DEFAULT_CONVERTER,
) -> List[ExpenseResult]:
    """
    Compute paid, owed and net amounts for each family.
    Returns one result per family, in the order of `families`.
    """
    paid = {f.id: 0.0 for f in families}
    owed = {f.id: 0.0 for f in families}

    for a in activities:
        if a.paid_by in paid:
            paid[a.paid_by] += converter.to_canonical(a.cost, a.currency)
        for family_id, share in activity_shares(a, converter).items():
            if family_id in owed:
                owed[family_id] += share

    return [
        ExpenseResult(
            family_id=f.id,
            family_name=f.name,
            total_paid=paid[f.id],
            total_owed=owed[f.id],
        ) for f in families
    ]


def filter_activities_by_date(
    activities: List[Activity],
    start: Optional[date],
    end: Optional[date]
) -> List[Activity]:
    """Filter activities by inclusive date range"""
    out = []
    for a in activities:
        ad = parse_date(a.date)
        if start and ad < start:
            continue
        if end and ad > end:
            continue
        out.append(a)
    return out


def compute_transfers(results: List[ExpenseResult], eps: float = 1e-6) -> List[Tuple[str, str, float]]:
    """
    Suggest payments that settle every family's balance.

    The family that owes the most pays the family owed the most until one
    of them is square, then moves on. Families with equal balances keep
    their order in `results`. Balances are tracked by family id, so two
    families sharing a name stay separate.
    Returns list of (debtor name, creditor name, amount) tuples.
    """
    # sorted() is stable, so ties keep input order
    debtors = sorted((r for r in results if r.net_amount < -eps), key=lambda r: r.net_amount)
    creditors = sorted((r for r in results if r.net_amount > eps), key=lambda r: -r.net_amount)
    owing = {r.family_id: -r.net_amount for r in debtors}
    due = {r.family_id: r.net_amount for r in creditors}

    transfers = []
    pending = iter(creditors)
    creditor = next(pending, None)
    for debtor in debtors:
        while creditor is not None and owing[debtor.family_id] > eps:
            amount = min(owing[debtor.family_id], due[creditor.family_id])
            transfers.append((debtor.family_name, creditor.family_name, amount))
            owing[debtor.family_id] -= amount
            due[creditor.family_id] -= amount
            if due[creditor.family_id] <= eps:
                creditor = next(pending, None)
    return transfers
