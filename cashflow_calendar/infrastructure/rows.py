"""Mapping from data-store rows (plain dicts) to domain records"""

from typing import Any, Dict, Iterable, List, Mapping, Optional

from cashflow_calendar.config import settings
from cashflow_calendar.domain.exceptions import InvalidRecordError
from cashflow_calendar.domain.models import (
    Account,
    AccountKind,
    Frequency,
    RecurringItem,
    SafetySettings,
    Transfer,
)
from cashflow_calendar.utils.date_utils import parse_calendar_date
from cashflow_calendar.utils.money import to_cents

Row = Mapping[str, Any]


def _optional_cents(value: Any) -> Optional[int]:
    return None if value is None else to_cents(value)


def _optional_date(value: Any):
    return parse_calendar_date(value) if value else None


def _is_active(row: Row) -> bool:
    # Null is_active means active, matching how rows are filtered upstream
    return row.get("is_active") is not False


def account_from_row(row: Row) -> Account:
    """
    Build an Account from an `accounts` row.

    Raises:
        InvalidRecordError: Missing or malformed fields
    """
    try:
        kind_value = row.get("account_type") or AccountKind.CHECKING.value
        kind = AccountKind(kind_value.strip().lower().replace("-", "_"))
        is_spendable = row.get("is_spendable")
        if is_spendable is None:
            is_spendable = kind != AccountKind.CREDIT_CARD

        return Account(
            id=str(row["id"]),
            name=row["name"],
            balance_cents=to_cents(row["current_balance"]),
            currency=row.get("currency") or settings.default_currency,
            kind=kind,
            is_spendable=bool(is_spendable),
            credit_limit_cents=_optional_cents(row.get("credit_limit")),
            apr=row.get("apr"),
            min_payment_percent=row.get("min_payment_percent"),
            payment_due_day=row.get("payment_due_day"),
        )
    except (KeyError, ValueError, TypeError) as e:
        raise InvalidRecordError(f"Invalid account row {row.get('id')!r}: {e}") from e


def bill_from_row(row: Row) -> RecurringItem:
    """
    Build a bill from a `bills` row (`due_date` anchors the recurrence).

    Raises:
        InvalidRecordError: Missing or malformed fields
        UnknownFrequencyError: Frequency is not supported
    """
    try:
        return RecurringItem(
            id=str(row["id"]),
            name=row["name"],
            amount_cents=abs(to_cents(row["amount"])),
            frequency=Frequency.parse(row["frequency"]),
            anchor_date=parse_calendar_date(row["due_date"]),
            is_active=_is_active(row),
            category=row.get("category"),
            account_id=row.get("account_id"),
            end_date=_optional_date(row.get("end_date")),
        )
    except (KeyError, ValueError, TypeError) as e:
        raise InvalidRecordError(f"Invalid bill row {row.get('id')!r}: {e}") from e


def income_from_row(row: Row) -> RecurringItem:
    """
    Build an income source from an `income` row.

    `next_date` anchors the recurrence, falling back to `start_date` for older rows.

    Raises:
        InvalidRecordError: Missing or malformed fields
        UnknownFrequencyError: Frequency is not supported
    """
    try:
        anchor = row.get("next_date") or row.get("start_date")
        if not anchor:
            raise ValueError("both next_date and start_date are missing")

        return RecurringItem(
            id=str(row["id"]),
            name=row["name"],
            amount_cents=abs(to_cents(row["amount"])),
            frequency=Frequency.parse(row["frequency"]),
            anchor_date=parse_calendar_date(anchor),
            is_active=_is_active(row),
            category=row.get("category"),
            account_id=row.get("account_id"),
            invoice_id=row.get("invoice_id"),
            end_date=_optional_date(row.get("end_date")),
            status=row.get("status"),
        )
    except (KeyError, ValueError, TypeError) as e:
        raise InvalidRecordError(f"Invalid income row {row.get('id')!r}: {e}") from e


def transfer_from_row(row: Row) -> Transfer:
    """
    Build a Transfer from a `transfers` row.

    Raises:
        InvalidRecordError: Missing or malformed fields
        UnknownFrequencyError: Frequency is not supported
    """
    try:
        return Transfer(
            id=str(row["id"]),
            from_account_id=str(row["from_account_id"]),
            to_account_id=str(row["to_account_id"]),
            amount_cents=abs(to_cents(row["amount"])),
            anchor_date=parse_calendar_date(row["transfer_date"]),
            frequency=Frequency.parse(row.get("frequency") or Frequency.ONE_TIME.value),
            is_active=_is_active(row),
            description=row.get("description"),
        )
    except (KeyError, ValueError, TypeError) as e:
        raise InvalidRecordError(f"Invalid transfer row {row.get('id')!r}: {e}") from e


def safety_settings_from_row(row: Optional[Row], accounts: Iterable[Account] = ()) -> SafetySettings:
    """
    Build SafetySettings from a `user_settings` row, falling back to configured defaults.

    Currency falls back to the first account's currency before the service default.
    """
    row = row or {}
    try:
        buffer = row.get("safety_buffer")
        buffer_cents = to_cents(settings.default_safety_buffer if buffer is None else buffer)
    except ValueError as e:
        raise InvalidRecordError(f"Invalid safety buffer: {e}") from e

    first_account = next(iter(accounts), None)
    currency = row.get("currency") or (first_account.currency if first_account else None)

    return SafetySettings(
        safety_buffer_cents=buffer_cents,
        timezone=row.get("timezone") or None,
        currency=currency or settings.default_currency,
    )


def records_from_rows(
    accounts: Iterable[Row],
    bills: Iterable[Row],
    income: Iterable[Row],
    transfers: Iterable[Row],
    user_settings: Optional[Row] = None,
) -> Dict[str, Any]:
    """Map every row set at once; keyword arguments ready for build_projection"""
    account_records: List[Account] = [account_from_row(row) for row in accounts]
    return {
        "accounts": account_records,
        "bills": [bill_from_row(row) for row in bills],
        "income": [income_from_row(row) for row in income],
        "transfers": [transfer_from_row(row) for row in transfers],
        "safety": safety_settings_from_row(user_settings, account_records),
    }
