from __future__ import annotations

import uuid
from datetime import date
from typing import Any, Iterable, Mapping, TypeVar

from pydantic import BaseModel, ValidationError

from models import TransactionStatus, TransactionType
from reconcile import materialize_template
from schemas import (
    DepositIn,
    Goal,
    GoalAmountIn,
    GoalIn,
    Ledger,
    RecurringTemplate,
    TemplateIn,
    Transaction,
    TransactionIn,
)

SchemaT = TypeVar("SchemaT", bound=BaseModel)


class InvalidInput(ValueError):
    pass


class NameCollision(ValueError):
    pass


def new_id() -> str:
    return uuid.uuid4().hex[:12]


def parse_input(schema: type[SchemaT], data: Mapping[str, Any]) -> SchemaT:
    try:
        return schema.model_validate(dict(data))
    except ValidationError as exc:
        raise InvalidInput(str(exc)) from exc


def _index_of(items: Iterable[Any], item_id: str, label: str) -> int:
    for index, item in enumerate(items):
        if item.id == item_id:
            return index
    raise InvalidInput(f"{label} not found")


def _replace_at(items: list, index: int, item: Any) -> list:
    result = list(items)
    result[index] = item
    return result


# -- transactions -----------------------------------------------------------


def initial_status(data: TransactionIn) -> TransactionStatus:
    if data.type == TransactionType.income or data.paid:
        return TransactionStatus.paid
    return TransactionStatus.open


def build_transaction(data: TransactionIn) -> Transaction:
    return Transaction(
        id=new_id(),
        name=data.name,
        amount=data.amount,
        type=data.type,
        date=data.date,
        category=data.category,
        status=initial_status(data),
    )


def add_transaction(ledger: Ledger, data: TransactionIn) -> Ledger:
    txn = build_transaction(data)
    return ledger.model_copy(update={"transactions": [*ledger.transactions, txn]})


def mark_paid(ledger: Ledger, transaction_id: str) -> Ledger:
    index = _index_of(ledger.transactions, transaction_id, "Transaction")
    txn = ledger.transactions[index]
    if txn.status == TransactionStatus.paid:
        return ledger
    updated = txn.model_copy(update={"status": TransactionStatus.paid})
    return ledger.model_copy(
        update={"transactions": _replace_at(ledger.transactions, index, updated)}
    )


def delete_transaction(ledger: Ledger, transaction_id: str) -> Ledger:
    _index_of(ledger.transactions, transaction_id, "Transaction")
    return ledger.model_copy(
        update={
            "transactions": [
                t for t in ledger.transactions if t.id != transaction_id
            ]
        }
    )


def is_duplicate(existing: Iterable[Transaction], candidate: TransactionIn) -> bool:
    """Advisory check on case-insensitive name, amount and date."""
    name = candidate.name.strip().casefold()
    for txn in existing:
        if (
            txn.name.strip().casefold() == name
            and txn.amount == candidate.amount
            and txn.date == candidate.date
        ):
            return True
    return False


# -- recurring templates ----------------------------------------------------


def add_template(ledger: Ledger, data: TemplateIn, today: date) -> Ledger:
    template = RecurringTemplate(
        id=new_id(),
        name=data.name,
        amount=data.amount,
        category=data.category,
        due_day=data.due_day,
    )
    ledger = ledger.model_copy(
        update={"recurring_templates": [*ledger.recurring_templates, template]}
    )
    return materialize_template(ledger, template, today)


def delete_template(ledger: Ledger, template_id: str) -> Ledger:
    # Transactions already generated from the template are kept.
    _index_of(ledger.recurring_templates, template_id, "Template")
    return ledger.model_copy(
        update={
            "recurring_templates": [
                t for t in ledger.recurring_templates if t.id != template_id
            ]
        }
    )


# -- goals ------------------------------------------------------------------


def add_goal(ledger: Ledger, data: GoalIn) -> Ledger:
    goal = Goal(
        id=new_id(),
        name=data.name,
        target_amount=data.target_amount,
        current_amount=data.current_amount,
        deadline=data.deadline,
    )
    return ledger.model_copy(update={"goals": [*ledger.goals, goal]})


def update_goal_amount(ledger: Ledger, goal_id: str, amount: Any) -> Ledger:
    amount = parse_input(GoalAmountIn, {"amount": amount}).amount
    index = _index_of(ledger.goals, goal_id, "Goal")
    updated = ledger.goals[index].model_copy(update={"current_amount": amount})
    return ledger.model_copy(
        update={"goals": _replace_at(ledger.goals, index, updated)}
    )


def deposit_to_goal(ledger: Ledger, goal_id: str, amount: Any) -> Ledger:
    amount = parse_input(DepositIn, {"amount": amount}).amount
    index = _index_of(ledger.goals, goal_id, "Goal")
    current = ledger.goals[index].current_amount
    return update_goal_amount(ledger, goal_id, current + amount)


def delete_goal(ledger: Ledger, goal_id: str) -> Ledger:
    _index_of(ledger.goals, goal_id, "Goal")
    return ledger.model_copy(
        update={"goals": [g for g in ledger.goals if g.id != goal_id]}
    )


# -- categories -------------------------------------------------------------


def add_category(ledger: Ledger, name: str) -> Ledger:
    name = (name or "").strip()
    if not name:
        raise InvalidInput("Category name cannot be empty")
    if name in ledger.categories:
        return ledger
    return ledger.model_copy(update={"categories": [*ledger.categories, name]})


def rename_category(ledger: Ledger, old_name: str, new_name: str) -> Ledger:
    new_name = (new_name or "").strip()
    if not new_name or new_name == old_name:
        return ledger
    if new_name in ledger.categories:
        raise NameCollision(f"Category '{new_name}' already exists")
    if old_name not in ledger.categories:
        raise InvalidInput("Category not found")

    categories = [new_name if c == old_name else c for c in ledger.categories]
    transactions = [
        t.model_copy(update={"category": new_name}) if t.category == old_name else t
        for t in ledger.transactions
    ]
    templates = [
        t.model_copy(update={"category": new_name}) if t.category == old_name else t
        for t in ledger.recurring_templates
    ]
    return ledger.model_copy(
        update={
            "categories": categories,
            "transactions": transactions,
            "recurring_templates": templates,
        }
    )


def delete_category(ledger: Ledger, name: str) -> Ledger:
    # References in transactions and templates are left as they are.
    if name not in ledger.categories:
        return ledger
    return ledger.model_copy(
        update={"categories": [c for c in ledger.categories if c != name]}
    )
