import logging
from typing import Optional

from pydantic import ValidationError
from sqlalchemy.orm import Session

from config import get_settings
from models import StoredState
from schemas import Ledger

logger = logging.getLogger(__name__)


def default_ledger() -> Ledger:
    return Ledger()


def decode_ledger(raw: Optional[str]) -> Ledger:
    """Parse a stored ledger document, falling back to an empty ledger."""
    if not raw:
        return default_ledger()
    try:
        return Ledger.model_validate_json(raw)
    except ValidationError as exc:
        logger.warning(
            f"ledger_load: invalid stored state, using defaults "
            f"errors={exc.error_count()}"
        )
        return default_ledger()


def encode_ledger(ledger: Ledger) -> str:
    return ledger.model_dump_json(by_alias=True)


class LedgerRepository:
    def __init__(self, session: Session, key: Optional[str] = None) -> None:
        self.session = session
        self.key = key or get_settings().state_key

    def load(self) -> Ledger:
        row = self.session.get(StoredState, self.key)
        if row is None:
            logger.info(f"ledger_load: key={self.key} no stored state")
            return default_ledger()
        return decode_ledger(row.value)

    def save(self, ledger: Ledger) -> None:
        payload = encode_ledger(ledger)
        row = self.session.get(StoredState, self.key)
        if row is None:
            self.session.add(StoredState(key=self.key, value=payload))
        else:
            row.value = payload
        self.session.flush()
