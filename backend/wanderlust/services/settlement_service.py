"""
Settlement service: net balances and debt-minimizing transfers.

compute_balances() and settle() are pure functions over an immutable ledger
snapshot. calculate_settlement() loads the snapshot for a trip and renders
the result for the API.
"""
import logging
from decimal import Decimal
from typing import Dict, Iterable, List, Optional
from sqlalchemy.orm import Session
from wanderlust.core.config import settings
from wanderlust.core.exceptions import InvariantViolation, ReferentialIntegrityError
from wanderlust.core.types import ParticipantId, round_money, to_money
from wanderlust.core.utils import format_currency
from wanderlust.models.trip import Trip
from wanderlust.schemas.expense import ExpenseRecord, Participant
from wanderlust.schemas.settlement import BalanceItem, Settlement, SettlementSummary, Transfer
from wanderlust.services.expense_service import load_ledger

logger = logging.getLogger(__name__)


def _participant_id(participant) -> ParticipantId:
    # Accept Participant records or bare ids
    return getattr(participant, "id", participant)


def compute_balances(
    participants: Iterable[Participant],
    expenses: Iterable[ExpenseRecord]
) -> Dict[ParticipantId, Decimal]:
    """
    Compute each participant's net balance (paid - owed).

    Every participant starts at zero so that people without transactions
    still appear. The payer is credited the full amount and every member of
    split_between, the payer included, is debited an equal share. Shares are
    kept at full precision; rounding happens only in settle().

    Raises:
        ReferentialIntegrityError: an expense names a participant not in
            participants.
        InvariantViolation: an expense has an empty split_between.
    """
    balances: Dict[ParticipantId, Decimal] = {
        _participant_id(p): Decimal(0) for p in participants
    }

    for expense in expenses:
        if not expense.split_between:
            raise InvariantViolation(f"Expense {expense.id} has no participants to split between")
        if expense.payer_id not in balances:
            raise ReferentialIntegrityError(expense.payer_id, expense.id)
        for member_id in expense.split_between:
            if member_id not in balances:
                raise ReferentialIntegrityError(member_id, expense.id)

        amount = to_money(expense.amount)
        share = amount / len(expense.split_between)

        balances[expense.payer_id] += amount
        for member_id in expense.split_between:
            balances[member_id] -= share

    return balances


def settle(
    balances: Dict[ParticipantId, Decimal],
    epsilon: Optional[Decimal] = None
) -> List[Settlement]:
    """
    Produce transfers that bring every balance to zero.

    Greedy matching: debtors sorted most negative first, creditors most
    positive first, each step moves min(|debt|, credit) from the current
    debtor to the current creditor. Ties keep the order of the balances
    mapping. Yields at most len(debtors) + len(creditors) - 1 transfers;
    balances within epsilon of zero are treated as settled.
    """
    if epsilon is None:
        epsilon = settings.SETTLEMENT_EPSILON

    debtors = [[pid, to_money(bal)] for pid, bal in balances.items() if to_money(bal) < -epsilon]
    creditors = [[pid, to_money(bal)] for pid, bal in balances.items() if to_money(bal) > epsilon]

    # sort() is stable, so equal balances keep mapping order
    debtors.sort(key=lambda x: x[1])
    creditors.sort(key=lambda x: x[1], reverse=True)

    settlements = []
    i = j = 0

    while i < len(debtors) and j < len(creditors):
        debtor = debtors[i]
        creditor = creditors[j]

        amount = min(abs(debtor[1]), creditor[1])
        settlements.append(Settlement(
            from_id=debtor[0],
            to_id=creditor[0],
            amount=round_money(amount)
        ))

        debtor[1] += amount
        creditor[1] -= amount

        if abs(debtor[1]) <= epsilon:
            i += 1
        if abs(creditor[1]) <= epsilon:
            j += 1

    return settlements


def calculate_settlement(
    trip: Trip,
    db: Session,
    folder_id: Optional[int] = None
) -> SettlementSummary:
    """
    Calculate settlement for a trip.

    folder_id selects one folder; None settles across all folders.
    """
    participants, expenses = load_ledger(trip, db, folder_id=folder_id)
    balances = compute_balances(participants, expenses)
    settlements = settle(balances)

    logger.debug(
        f"Trip {trip.id}: {len(expenses)} expenses, {len(participants)} travelers, "
        f"{len(settlements)} transfers"
    )

    names = {p.id: p.name for p in participants}
    currency = trip.currency
    total_spent = sum((to_money(e.amount) for e in expenses), Decimal(0))

    transfers = [
        Transfer(
            from_id=s.from_id,
            from_name=names.get(s.from_id, ""),
            to_id=s.to_id,
            to_name=names.get(s.to_id, ""),
            amount=s.amount
        )
        for s in settlements
    ]
    net_balances = [
        BalanceItem(id=pid, name=names.get(pid, ""), balance=round_money(bal))
        for pid, bal in balances.items()
    ]

    # Create summary text
    summary_lines = []
    summary_lines.append(f"Total spent: {format_currency(total_spent, currency)}")
    summary_lines.append(f"Travelers: {len(participants)}")
    summary_lines.append("\nNet balances:")
    for item in net_balances:
        sign = "+" if item.balance > 0 else ""
        summary_lines.append(f"  {item.name}: {sign}{format_currency(item.balance, currency)}")
    summary_lines.append("\nTransfers:")
    if transfers:
        for transfer in transfers:
            summary_lines.append(
                f"  {transfer.from_name} -> {transfer.to_name}: "
                f"{format_currency(transfer.amount, currency)}"
            )
    else:
        summary_lines.append("  All settled up! No one owes anything.")

    return SettlementSummary(
        trip_id=trip.id,
        currency=currency,
        folder_id=folder_id,
        net_balances=net_balances,
        transfers=transfers,
        total_spent=total_spent,
        participant_count=len(participants),
        summary="\n".join(summary_lines)
    )
