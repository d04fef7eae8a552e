# esreport/core/config.py
"""Environment-driven settings for the search backend and the request log."""

import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class SearchSettings(BaseModel):
    """Connection and limit settings for the Elasticsearch/Kibana backend."""

    url: str = "http://localhost:9200"
    username: str = ""
    password: str = ""
    ui_endpoint: str = "http://localhost:5601/api"
    verify_ssl: bool = True
    timeout_seconds: float = Field(default=30.0, gt=0)

    # Pagination guards; max_pages counts pages that carry hits
    max_pages: int = Field(default=1000, ge=1)
    max_rows: int = Field(default=1_000_000, ge=1)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_env(cls) -> "SearchSettings":
        return cls(
            url=os.getenv("ELASTIC_URL", "http://localhost:9200").rstrip("/"),
            username=os.getenv("ELASTIC_USERNAME", ""),
            password=os.getenv("ELASTIC_PASSWORD", ""),
            ui_endpoint=os.getenv("ELASTIC_UI_ENDPOINT", "http://localhost:5601/api").rstrip("/"),
            verify_ssl=_env_bool("ELASTIC_VERIFY_SSL", True),
            timeout_seconds=float(os.getenv("ELASTIC_TIMEOUT_SECONDS", "30")),
            max_pages=int(os.getenv("SEARCH_MAX_PAGES", "1000")),
            max_rows=int(os.getenv("SEARCH_MAX_ROWS", "1000000")),
        )


@lru_cache
def get_settings() -> SearchSettings:
    """Settings are read once per process."""
    return SearchSettings.from_env()


APPLICATION_ID = os.getenv("APPLICATION_ID", "Unknown")
