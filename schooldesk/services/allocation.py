"""Fee allocation: spreading a signed amount over a student's charges.

A positive amount is a payment. It fills outstanding charges greedily in
``unpaid_list`` order (partially paid first, then oldest first) until the
amount or the debt runs out.

A negative amount is a reversal. It takes money back from charges in
``paid_list`` order (least paid first, then most recent first).

Planning is pure: ``plan_allocation`` turns snapshots into ``(id, delta)``
updates. ``FeeAllocator`` fetches the snapshots and applies the plan inside
the caller's session.

Guarantees for ``used = allocate(student, amount)``:
- used has the sign of amount, or is 0
- |used| <= |amount|
- total paid over the student's charges changes by exactly used
- no charge's paid leaves [0, amount]

Amounts are truncated to whole cents before planning, so fractions of a
cent are never planned or reported as used.
"""

import logging
from decimal import ROUND_DOWN, Decimal
from typing import Iterable, NamedTuple

from schooldesk.db import SessionFactory, session_scope
from schooldesk.errors import StoreError
from schooldesk.models import MonthlyFee
from schooldesk.services.charge_store import ChargeModel, ChargeSnapshot, ChargeStore

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
CENT = Decimal("0.01")


def to_cents(value: Decimal) -> Decimal:
    """Truncate a money value toward zero to whole cents, the precision charges are stored at."""
    return Decimal(value).quantize(CENT, rounding=ROUND_DOWN)


class ChargeUpdate(NamedTuple):
    """Change to apply to one charge's paid amount."""

    charge_id: int
    delta: Decimal


def plan_allocation(charges: Iterable[ChargeSnapshot], amount: Decimal) -> list[ChargeUpdate]:
    """Plan how a signed amount is spread over ordered charges.

    Args:
        charges: Snapshots already in allocation order (unpaid order for a
            payment, paid order for a reversal)
        amount: Positive to pay, negative to reverse

    Returns:
        Updates in application order; empty when amount is 0
    """
    amount = to_cents(amount)
    updates: list[ChargeUpdate] = []
    if amount == 0:
        return updates

    if amount > 0:
        remain = amount
        for charge in charges:
            if remain <= 0:
                break
            due = charge.amount - charge.paid
            if due <= 0:
                continue
            pay = min(due, remain)
            updates.append(ChargeUpdate(charge.id, pay))
            remain -= pay
    else:
        remain = -amount
        for charge in charges:
            if remain <= 0:
                break
            if charge.paid <= 0:
                continue
            take = min(charge.paid, remain)
            updates.append(ChargeUpdate(charge.id, -take))
            remain -= take

    return updates


def plan_bulk(count: int, fee: Decimal, have_amount: Decimal) -> list[Decimal]:
    """Paid amount for each of count new charges of fee, funded by have_amount.

    Charges are filled in order, so charge ``i`` gets
    ``min(fee, max(0, have_amount - i * fee))``.
    """
    if count <= 0:
        return []
    remain = to_cents(have_amount)
    fee = to_cents(fee)
    paid_amounts = []
    for _ in range(count):
        if remain >= fee:
            paid = fee
        elif remain > 0:
            paid = remain
        else:
            paid = ZERO
        remain -= paid
        paid_amounts.append(paid)
    return paid_amounts


def used_amount(updates: Iterable[ChargeUpdate]) -> Decimal:
    """Signed total moved by a plan."""
    return sum((u.delta for u in updates), ZERO)


class FeeAllocator:
    """Applies allocation plans to one charge table."""

    def __init__(self, store: ChargeStore):
        """Initialize with the charge store whose session is the transaction."""
        self.store = store

    def allocate(self, student_id: int, amount: Decimal) -> Decimal:
        """Spread amount over the student's charges and return the amount used.

        Args:
            student_id: Student whose charges are touched
            amount: Positive to pay, negative to reverse, 0 is a no-op

        Returns:
            Signed amount actually applied

        Raises:
            StoreError: If a planned charge disappeared mid-transaction
        """
        amount = to_cents(amount)
        if amount == 0:
            return ZERO

        if amount > 0:
            charges = self.store.unpaid_list(student_id)
        else:
            charges = self.store.paid_list(student_id)

        updates = plan_allocation(charges, amount)
        for charge_update in updates:
            if not self.store.apply_delta(charge_update.charge_id, charge_update.delta):
                raise StoreError(f"Charge {charge_update.charge_id} vanished during allocation")

        used = used_amount(updates)
        logger.info(
            "Allocated %s of %s to %s for student_id=%d across %d charges",
            used,
            amount,
            self.store.model.__tablename__,
            student_id,
            len(updates),
        )
        return used


def allocate(
    student_id: int,
    amount: Decimal,
    model: ChargeModel = MonthlyFee,
    session_factory: SessionFactory | None = None,
) -> Decimal:
    """Allocate in a transaction of its own, for callers without a session."""
    with session_scope(session_factory) as session:
        return FeeAllocator(ChargeStore(session, model)).allocate(student_id, amount)


__all__ = [
    "ChargeUpdate",
    "FeeAllocator",
    "allocate",
    "plan_allocation",
    "plan_bulk",
    "to_cents",
    "used_amount",
]
