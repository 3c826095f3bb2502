import os

os.environ.setdefault("FINANZA_DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("FINANZA_TIMEZONE", "UTC")

from datetime import date  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from database import Base  # noqa: E402


class FixedClock:
    def __init__(self, today: date) -> None:
        self.current = today

    def today(self) -> date:
        return self.current


@pytest.fixture
def session_factory():
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
