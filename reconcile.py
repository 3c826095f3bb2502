import logging
from datetime import date, datetime
from typing import Union

from clock import MonthKey, clamp_day
from models import TransactionStatus, TransactionType
from schemas import Ledger, RecurringTemplate, Transaction

logger = logging.getLogger(__name__)


def _as_date(now: Union[date, datetime]) -> date:
    if isinstance(now, datetime):
        return now.date()
    return now


def instance_id(template_id: str, month: MonthKey) -> str:
    """Identity of a template's generated transaction for ``month``."""
    return f"rec-{template_id}-{month.start.isoformat()}"


def instance_due_date(template: RecurringTemplate, month: MonthKey) -> date:
    return clamp_day(month.year, month.month, template.due_day)


def _build_instance(template: RecurringTemplate, month: MonthKey) -> Transaction:
    return Transaction(
        id=instance_id(template.id, month),
        name=template.name,
        amount=template.amount,
        type=TransactionType.expense,
        date=instance_due_date(template, month),
        category=template.category,
        status=TransactionStatus.open,
        template_id=template.id,
    )


def _promote_overdue(
    transactions: list[Transaction], month: MonthKey
) -> tuple[list[Transaction], int]:
    promoted = 0
    result: list[Transaction] = []
    for txn in transactions:
        if (
            txn.type == TransactionType.expense
            and txn.status == TransactionStatus.open
            and txn.date < month.start
        ):
            txn = txn.model_copy(update={"status": TransactionStatus.overdue})
            promoted += 1
        result.append(txn)
    return result, promoted


def _materialize(
    transactions: list[Transaction],
    templates: list[RecurringTemplate],
    month: MonthKey,
) -> tuple[list[Transaction], int]:
    existing = {txn.id for txn in transactions}
    result = list(transactions)
    generated = 0
    for template in templates:
        key = instance_id(template.id, month)
        if key in existing:
            continue
        result.append(_build_instance(template, month))
        existing.add(key)
        generated += 1
    return result, generated


def materialize_template(
    ledger: Ledger, template: RecurringTemplate, now: Union[date, datetime]
) -> Ledger:
    month = MonthKey.of(_as_date(now))
    transactions, generated = _materialize(ledger.transactions, [template], month)
    if not generated:
        return ledger
    return ledger.model_copy(update={"transactions": transactions})


def reconcile(ledger: Ledger, now: Union[date, datetime]) -> Ledger:
    """Apply overdue promotion and template instances once per month."""
    month = MonthKey.of(_as_date(now))
    if ledger.last_sync_date == month:
        return ledger

    transactions, promoted = _promote_overdue(ledger.transactions, month)
    transactions, generated = _materialize(
        transactions, ledger.recurring_templates, month
    )
    logger.info(
        f"reconcile: month={month} previous={ledger.last_sync_date} "
        f"overdue={promoted} generated={generated}"
    )
    return ledger.model_copy(
        update={"transactions": transactions, "last_sync_date": month}
    )
