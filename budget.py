import logging
import threading
from decimal import Decimal
from typing import Any, Callable, Mapping, Optional

from sqlalchemy.orm import sessionmaker

import services
from clock import SystemClock
from database import SessionLocal, init_db, session_scope
from reconcile import reconcile
from schemas import GoalIn, Ledger, TemplateIn, Transaction, TransactionIn
from storage import LedgerRepository

logger = logging.getLogger(__name__)

ConfirmDuplicate = Callable[[TransactionIn], bool]


class BudgetApp:
    """Owns the ledger for one local process."""

    def __init__(
        self,
        session_factory: sessionmaker = SessionLocal,
        clock: Optional[Any] = None,
        state_key: Optional[str] = None,
    ) -> None:
        self.session_factory = session_factory
        self.clock = clock or SystemClock()
        self.state_key = state_key
        self._lock = threading.RLock()
        self._ledger: Optional[Ledger] = None

    @property
    def ledger(self) -> Ledger:
        if self._ledger is None:
            raise RuntimeError("BudgetApp.start() has not been called")
        return self._ledger

    def start(self) -> Ledger:
        with self._lock:
            with session_scope(self.session_factory) as session:
                init_db(session.get_bind())
                repo = LedgerRepository(session, self.state_key)
                self._ledger = reconcile(repo.load(), self.clock.today())
                repo.save(self._ledger)
            return self._ledger

    def reconcile(self) -> Ledger:
        with self._lock:
            current = self.ledger
            updated = reconcile(current, self.clock.today())
            if updated is not current:
                self._commit(updated)
            return self.ledger

    def _commit(self, ledger: Ledger) -> Ledger:
        with session_scope(self.session_factory) as session:
            LedgerRepository(session, self.state_key).save(ledger)
        self._ledger = ledger
        return ledger

    def _apply(self, operation: Callable[..., Ledger], *args: Any) -> Ledger:
        with self._lock:
            updated = operation(self.ledger, *args)
            if updated is self.ledger:
                return updated
            return self._commit(updated)

    # transactions

    def add_transaction(
        self,
        data: Mapping[str, Any],
        confirm_duplicate: Optional[ConfirmDuplicate] = None,
    ) -> Optional[Transaction]:
        candidate = services.parse_input(TransactionIn, data)
        with self._lock:
            if services.is_duplicate(self.ledger.transactions, candidate):
                logger.info(
                    f"add_transaction: probable duplicate name={candidate.name}"
                )
                if confirm_duplicate is not None and not confirm_duplicate(candidate):
                    return None
            ledger = self._apply(services.add_transaction, candidate)
            return ledger.transactions[-1]

    def mark_paid(self, transaction_id: str) -> Ledger:
        return self._apply(services.mark_paid, transaction_id)

    def delete_transaction(self, transaction_id: str) -> Ledger:
        return self._apply(services.delete_transaction, transaction_id)

    # templates

    def add_template(self, data: Mapping[str, Any]) -> Ledger:
        template = services.parse_input(TemplateIn, data)
        return self._apply(services.add_template, template, self.clock.today())

    def delete_template(self, template_id: str) -> Ledger:
        return self._apply(services.delete_template, template_id)

    # goals

    def add_goal(self, data: Mapping[str, Any]) -> Ledger:
        goal = services.parse_input(GoalIn, data)
        return self._apply(services.add_goal, goal)

    def deposit_to_goal(self, goal_id: str, amount: Decimal) -> Ledger:
        return self._apply(services.deposit_to_goal, goal_id, amount)

    def update_goal_amount(self, goal_id: str, amount: Decimal) -> Ledger:
        return self._apply(services.update_goal_amount, goal_id, amount)

    def delete_goal(self, goal_id: str) -> Ledger:
        return self._apply(services.delete_goal, goal_id)

    # categories

    def add_category(self, name: str) -> Ledger:
        return self._apply(services.add_category, name)

    def rename_category(self, old_name: str, new_name: str) -> Ledger:
        return self._apply(services.rename_category, old_name, new_name)

    def delete_category(self, name: str) -> Ledger:
        return self._apply(services.delete_category, name)
