import json
from datetime import date
from decimal import Decimal

import pytest

from clock import MonthKey
from models import StoredState, TransactionStatus, TransactionType
from schemas import DEFAULT_CATEGORIES, Ledger, Transaction
from storage import LedgerRepository, decode_ledger, encode_ledger


def _ledger() -> Ledger:
    return Ledger(
        transactions=[
            Transaction(
                id="rec-t1-2024-02-01",
                name="Internet",
                amount=Decimal("100"),
                type=TransactionType.expense,
                date=date(2024, 2, 29),
                category="Utilities",
                status=TransactionStatus.open,
                template_id="t1",
            )
        ],
        categories=["Utilities"],
        last_sync_date=MonthKey(2024, 2),
    )


def test_encoded_record_uses_persisted_layout():
    payload = json.loads(encode_ledger(_ledger()))

    assert set(payload) == {
        "transactions",
        "categories",
        "goals",
        "recurringTemplates",
        "lastSyncDate",
    }
    assert payload["lastSyncDate"] == "2024-02"
    assert payload["transactions"][0]["templateId"] == "t1"
    assert payload["transactions"][0]["date"] == "2024-02-29"


def test_decode_reads_back_encoded_record():
    ledger = _ledger()
    assert decode_ledger(encode_ledger(ledger)) == ledger


def test_decode_accepts_timestamp_marker_and_numeric_amounts():
    raw = json.dumps(
        {
            "transactions": [
                {
                    "id": "abc",
                    "name": "Salário",
                    "amount": 3200.5,
                    "type": "income",
                    "date": "2024-01-05",
                    "category": "Outros",
                    "status": "paid",
                }
            ],
            "categories": None,
            "goals": [
                {
                    "id": "g1",
                    "name": "Reserva",
                    "targetAmount": 10000,
                    "currentAmount": 1500,
                    "deadline": "2024-12-31",
                }
            ],
            "recurringTemplates": [
                {
                    "id": "t1",
                    "name": "Luz",
                    "amount": 180,
                    "dueDay": 10,
                    "category": "Moradia",
                }
            ],
            "lastSyncDate": "2024-01-20T13:45:10.123Z",
        }
    )

    ledger = decode_ledger(raw)

    assert ledger.last_sync_date == MonthKey(2024, 1)
    assert ledger.categories == DEFAULT_CATEGORIES
    assert ledger.transactions[0].amount == Decimal("3200.5")
    assert ledger.goals[0].target_amount == Decimal("10000")
    assert ledger.recurring_templates[0].due_day == 10


@pytest.mark.parametrize(
    "raw",
    [
        "{not json",
        "[]",
        json.dumps({"transactions": [{"id": "x"}]}),
        json.dumps({"transactions": [], "lastSyncDate": "soon"}),
        json.dumps(
            {
                "goals": [
                    {
                        "id": "g",
                        "name": "Reserva",
                        "targetAmount": 100,
                        "currentAmount": -5,
                        "deadline": "2024-12-31",
                    }
                ]
            }
        ),
        json.dumps(
            {
                "recurringTemplates": [
                    {"id": "t", "name": "X", "amount": 1, "category": "Y", "dueDay": 40}
                ]
            }
        ),
    ],
)
def test_decode_falls_back_to_defaults_on_bad_records(raw):
    assert decode_ledger(raw) == Ledger()


def test_repository_round_trip(session_factory):
    with session_factory() as session:
        repo = LedgerRepository(session, key="test")
        assert repo.load() == Ledger()
        repo.save(_ledger())
        session.commit()

    with session_factory() as session:
        assert LedgerRepository(session, key="test").load() == _ledger()
        updated = _ledger().model_copy(update={"categories": ["Utilities", "Pets"]})
        LedgerRepository(session, key="test").save(updated)
        session.commit()

    with session_factory() as session:
        assert session.query(StoredState).count() == 1
        assert LedgerRepository(session, key="test").load().categories == [
            "Utilities",
            "Pets",
        ]


def test_repository_recovers_from_corrupt_row(session_factory):
    with session_factory() as session:
        session.add(StoredState(key="test", value="{\"transactions\": 5}"))
        session.commit()

    with session_factory() as session:
        assert LedgerRepository(session, key="test").load() == Ledger()
