import logging
import os
from typing import Optional
from pydantic import BaseModel

PLACEHOLDER_URL = "YOUR_SUPABASE_URL"
PLACEHOLDER_KEY = "YOUR_SUPABASE_ANON_KEY"

DEFAULT_STORE_PATH = "punchcard_data.json"

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(module)s | %(message)s"

_TRUTHY = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    store_path: str = DEFAULT_STORE_PATH
    seed_sample_data: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, default_store_path: str = DEFAULT_STORE_PATH) -> "Settings":
        """Build settings from the environment. PUNCHCARD_STORE_PATH wins over default_store_path."""
        return cls(
            supabase_url=os.getenv("SUPABASE_URL"),
            supabase_key=os.getenv("SUPABASE_ANON_KEY"),
            store_path=os.getenv("PUNCHCARD_STORE_PATH", default_store_path),
            seed_sample_data=os.getenv("PUNCHCARD_SEED_SAMPLE_DATA", "false").lower() in _TRUTHY,
            log_level=os.getenv("PUNCHCARD_LOG_LEVEL", "INFO"),
        )

    @property
    def remote_configured(self) -> bool:
        if not self.supabase_url or not self.supabase_key:
            return False
        return self.supabase_url != PLACEHOLDER_URL and self.supabase_key != PLACEHOLDER_KEY


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(level.upper())
