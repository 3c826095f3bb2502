import datetime as dt
from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    PlainValidator,
    field_validator,
)
from pydantic.alias_generators import to_camel

from clock import MonthKey
from models import TransactionStatus, TransactionType

DEFAULT_CATEGORIES = [
    "Alimentação",
    "Transporte",
    "Lazer",
    "Moradia",
    "Saúde",
    "Educação",
    "Outros",
]


def _month_marker(value: Any) -> MonthKey:
    if isinstance(value, MonthKey):
        return value
    if isinstance(value, (date, datetime)):
        return MonthKey.of(value)
    if isinstance(value, str):
        return MonthKey.parse(value)
    raise ValueError(f"Invalid month marker: {value!r}")


MonthMarker = Annotated[
    MonthKey,
    PlainValidator(_month_marker),
    PlainSerializer(str, return_type=str),
]


class LedgerModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class Transaction(LedgerModel):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0)
    type: TransactionType
    date: dt.date
    category: str
    status: TransactionStatus
    template_id: Optional[str] = None


class RecurringTemplate(LedgerModel):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0)
    category: str
    due_day: int = Field(..., ge=1, le=31)


class Goal(LedgerModel):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    target_amount: Decimal = Field(..., gt=0)
    current_amount: Decimal = Field(default=Decimal("0"), ge=0)
    deadline: dt.date


class Ledger(LedgerModel):
    transactions: list[Transaction] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=lambda: list(DEFAULT_CATEGORIES))
    goals: list[Goal] = Field(default_factory=list)
    recurring_templates: list[RecurringTemplate] = Field(default_factory=list)
    last_sync_date: Optional[MonthMarker] = None

    @field_validator("categories", mode="before")
    @classmethod
    def default_categories(cls, value: Any) -> Any:
        # Older records were saved before categories existed.
        if value is None:
            return list(DEFAULT_CATEGORIES)
        return value

    @field_validator("categories")
    @classmethod
    def unique_categories(cls, value: list[str]) -> list[str]:
        seen: list[str] = []
        for name in value:
            if name and name not in seen:
                seen.append(name)
        return seen


class TransactionIn(LedgerModel):
    name: str = Field(..., min_length=1, max_length=200)
    amount: Decimal = Field(..., gt=0)
    type: TransactionType
    date: dt.date
    category: str = Field(..., min_length=1, max_length=100)
    paid: bool = False


class TemplateIn(LedgerModel):
    name: str = Field(..., min_length=1, max_length=200)
    amount: Decimal = Field(..., gt=0)
    category: str = Field(..., min_length=1, max_length=100)
    due_day: int = Field(..., ge=1, le=31)


class GoalIn(LedgerModel):
    name: str = Field(..., min_length=1, max_length=200)
    target_amount: Decimal = Field(..., gt=0)
    current_amount: Decimal = Field(default=Decimal("0"), ge=0)
    deadline: date


class GoalAmountIn(LedgerModel):
    amount: Decimal = Field(..., ge=0, allow_inf_nan=False)


class DepositIn(LedgerModel):
    amount: Decimal = Field(..., gt=0, allow_inf_nan=False)
