"""Event normalization - bills, income and transfers become one stream of cash events"""

import logging
from datetime import date
from typing import Iterable, List, Optional, Sequence

from cashflow_calendar.domain.exceptions import InvalidTransferError, NoAccountsError, UnknownAccountError
from cashflow_calendar.domain.models import Account, CashEvent, EventKind, RecurringItem, Transfer
from cashflow_calendar.domain.recurrence import expand
from cashflow_calendar.utils.date_utils import clamp_day

logger = logging.getLogger(__name__)


def resolve_default_account(accounts: Sequence[Account]) -> str:
    """Account that receives events with no account of their own: first spendable, else first"""
    if not accounts:
        raise NoAccountsError("At least one account is required to build a projection")

    for account in accounts:
        if account.is_spendable:
            return account.id
    return accounts[0].id


def bill_events(bill: RecurringItem, account_id: str, window_start: date, window_end: date) -> List[CashEvent]:
    """Negative events for each occurrence of an active bill"""
    if not bill.is_active:
        return []

    return [
        CashEvent(
            date=occurrence,
            account_id=account_id,
            delta_cents=-abs(bill.amount_cents),
            kind=EventKind.BILL,
            label=bill.name,
            source_id=bill.id,
            category=bill.category,
        )
        for occurrence in expand(bill.anchor_date, bill.frequency, window_start, window_end, until=bill.end_date)
    ]


def income_events(income: RecurringItem, account_id: str, window_start: date, window_end: date) -> List[CashEvent]:
    """Positive events for each occurrence of an active income source"""
    if not income.is_active:
        return []

    return [
        CashEvent(
            date=occurrence,
            account_id=account_id,
            delta_cents=abs(income.amount_cents),
            kind=EventKind.INCOME,
            label=income.name,
            source_id=income.id,
            category=income.category,
            invoice_id=income.invoice_id,
            status=income.status,
        )
        for occurrence in expand(income.anchor_date, income.frequency, window_start, window_end, until=income.end_date)
    ]


def transfer_events(transfer: Transfer, window_start: date, window_end: date) -> List[CashEvent]:
    """
    Matched debit/credit pair for each occurrence of an active transfer.

    Raises:
        InvalidTransferError: Source and destination are the same account
    """
    if not transfer.is_active:
        return []
    if transfer.from_account_id == transfer.to_account_id:
        raise InvalidTransferError(f"Transfer {transfer.id} moves money from an account to itself")

    label = transfer.description or "Transfer"
    amount = abs(transfer.amount_cents)

    events = []
    for occurrence in expand(transfer.anchor_date, transfer.frequency, window_start, window_end):
        events.append(
            CashEvent(
                date=occurrence,
                account_id=transfer.from_account_id,
                delta_cents=-amount,
                kind=EventKind.TRANSFER_OUT,
                label=label,
                source_id=transfer.id,
            )
        )
        events.append(
            CashEvent(
                date=occurrence,
                account_id=transfer.to_account_id,
                delta_cents=amount,
                kind=EventKind.TRANSFER_IN,
                label=label,
                source_id=transfer.id,
            )
        )
    return events


def next_payment_date(payment_due_day: int, on_or_after: date) -> date:
    """Next card payment due date, clamping the due day to short months"""
    this_month = clamp_day(on_or_after.year, on_or_after.month, payment_due_day)
    if this_month >= on_or_after:
        return this_month

    year, month = (on_or_after.year + 1, 1) if on_or_after.month == 12 else (on_or_after.year, on_or_after.month + 1)
    return clamp_day(year, month, payment_due_day)


def credit_card_payment_events(
    accounts: Iterable[Account],
    paying_account_id: str,
    window_start: date,
    window_end: date,
) -> List[CashEvent]:
    """
    Next statement payment of each credit card with a balance owed.

    Each payment is a bill on the paying account plus a matching credit that clears
    the card. Only the next due date is projected: future charges and whether the
    user pays in full are unknown, so repeating today's balance monthly would
    overstate outflow. A card is never paid from itself.
    """
    events = []
    for account in accounts:
        if not account.is_credit_card or not account.payment_due_day:
            continue
        if not 1 <= account.payment_due_day <= 31 or account.balance_cents <= 0:
            continue
        if account.id == paying_account_id:
            continue

        due = next_payment_date(account.payment_due_day, window_start)
        if due > window_end:
            continue

        label = f"{account.name} Payment"
        source_id = f"cc-payment-{account.id}"
        events.append(
            CashEvent(
                date=due,
                account_id=paying_account_id,
                delta_cents=-account.balance_cents,
                kind=EventKind.BILL,
                label=label,
                source_id=source_id,
                category="credit_card_payment",
            )
        )
        events.append(
            CashEvent(
                date=due,
                account_id=account.id,
                delta_cents=account.balance_cents,
                kind=EventKind.TRANSFER_IN,
                label=label,
                source_id=source_id,
                category="credit_card_payment",
            )
        )
    return events


def _dedupe_invoice_income(income: Iterable[RecurringItem]) -> List[RecurringItem]:
    """An invoice's expected payment counts once, as the first income row linked to it"""
    seen = set()
    kept = []
    for item in income:
        if item.invoice_id:
            if item.invoice_id in seen:
                logger.warning(
                    "Skipping duplicate income linked to invoice",
                    extra={"income_id": item.id, "invoice_id": item.invoice_id},
                )
                continue
            seen.add(item.invoice_id)
        kept.append(item)
    return kept


def _account_for(item_account_id: Optional[str], known_ids: set, default_account_id: str, source_id: str) -> str:
    if item_account_id is None:
        return default_account_id
    if item_account_id not in known_ids:
        raise UnknownAccountError(f"{source_id} references unknown account {item_account_id}")
    return item_account_id


def normalize(
    accounts: Sequence[Account],
    bills: Iterable[RecurringItem],
    income: Iterable[RecurringItem],
    transfers: Iterable[Transfer],
    window_start: date,
    window_end: date,
) -> List[CashEvent]:
    """
    Convert source records into the merged cash event stream for a window.

    Order: bills, card payments, income, transfers; each in input order, then by date.
    The walker's stable sort keeps this order for same-day events.

    Raises:
        NoAccountsError: No accounts supplied
        UnknownAccountError: A record references an account that was not supplied
        InvalidTransferError: A transfer's source equals its destination
    """
    default_account_id = resolve_default_account(accounts)
    known_ids = {account.id for account in accounts}

    events: List[CashEvent] = []
    for bill in bills:
        if not bill.is_active:
            continue
        account_id = _account_for(bill.account_id, known_ids, default_account_id, bill.id)
        events.extend(bill_events(bill, account_id, window_start, window_end))

    events.extend(credit_card_payment_events(accounts, default_account_id, window_start, window_end))

    for item in _dedupe_invoice_income(i for i in income if i.is_active):
        account_id = _account_for(item.account_id, known_ids, default_account_id, item.id)
        events.extend(income_events(item, account_id, window_start, window_end))

    for transfer in transfers:
        if not transfer.is_active:
            continue
        for account_id in (transfer.from_account_id, transfer.to_account_id):
            _account_for(account_id, known_ids, default_account_id, transfer.id)
        events.extend(transfer_events(transfer, window_start, window_end))

    return events
