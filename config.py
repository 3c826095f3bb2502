import os
from functools import lru_cache
from pathlib import Path


class Settings:
    def __init__(
        self,
        database_url: str,
        timezone: str,
        state_key: str,
    ) -> None:
        self.database_url = database_url
        self.timezone = timezone
        self.state_key = state_key


def _ensure_data_dir() -> Path:
    root = Path(os.getenv("FINANZA_DATA_DIR", "./data")).resolve()
    root.mkdir(parents=True, exist_ok=True)
    return root


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    database_url = os.getenv("FINANZA_DATABASE_URL")
    if not database_url:
        default_db = _ensure_data_dir() / "finanza.db"
        database_url = f"sqlite:///{default_db}"
    timezone = os.getenv("FINANZA_TIMEZONE", "America/Sao_Paulo")
    state_key = os.getenv("FINANZA_STATE_KEY", "finanza_state")
    return Settings(
        database_url=database_url,
        timezone=timezone,
        state_key=state_key,
    )
