"""
enqoy.engine.credits — Credit Ledger Read Model
================================================

The credits page shows the balance the backend reports and the transaction
list exactly in the order supplied (newest first).  Positive amounts render
green, everything else red.

:func:`reconcile` checks the running-balance invariant
``balance[i] == balance[i-1] + amount[i]`` (oldest → newest) and reports the
rows that break it.  The display never rewrites numbers; mismatches are only
logged so support can chase them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from enqoy.constants import CREDIT_TYPE_LABELS

logger = logging.getLogger(__name__)

POSITIVE_COLOUR = "green"
NEGATIVE_COLOUR = "red"


class Transaction(Protocol):
    id: str
    type: str
    amount: int
    balance: int
    description: str


@dataclass(frozen=True, slots=True)
class LedgerRow:
    id: str
    label: str
    description: str
    amount_text: str
    balance: int
    colour: str


@dataclass(frozen=True, slots=True)
class LedgerMismatch:
    transaction_id: str
    expected_balance: int
    actual_balance: int


def amount_colour(amount: int) -> str:
    return POSITIVE_COLOUR if amount > 0 else NEGATIVE_COLOUR


def format_amount(amount: int) -> str:
    return f"+{amount}" if amount > 0 else str(amount)


def balance_label(balance: int) -> str:
    return f"{balance} Credit" if balance == 1 else f"{balance} Credits"


def ledger_rows(transactions: list[Transaction]) -> list[LedgerRow]:
    """Display rows in the order supplied."""
    return [
        LedgerRow(
            id=t.id,
            label=CREDIT_TYPE_LABELS.get(t.type, t.type),
            description=t.description,
            amount_text=format_amount(t.amount),
            balance=t.balance,
            colour=amount_colour(t.amount),
        )
        for t in transactions
    ]


def reconcile(transactions: list[Transaction]) -> list[LedgerMismatch]:
    """Rows whose balance snapshot disagrees with the previous row.

    *transactions* is newest-first, as the API returns them.  The oldest row
    has no predecessor and is taken as the starting point.
    """
    mismatches: list[LedgerMismatch] = []
    chronological = list(reversed(transactions))
    for prev, cur in zip(chronological, chronological[1:]):
        expected = prev.balance + cur.amount
        if cur.balance != expected:
            mismatches.append(
                LedgerMismatch(
                    transaction_id=cur.id,
                    expected_balance=expected,
                    actual_balance=cur.balance,
                )
            )
    if mismatches:
        logger.warning(
            "Credit ledger has %d balance mismatch(es): %s",
            len(mismatches),
            ", ".join(m.transaction_id for m in mismatches),
        )
    return mismatches
