from __future__ import annotations

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class ReaderSettings(BaseSettings):
    """
    Environment-driven settings for the PTT reader.
    """

    model_config = SettingsConfigDict(env_prefix="", env_file=".env", extra="ignore")

    # ---- HTTP ----
    ptt_base_url: str = Field(default="https://www.ptt.cc", alias="PTT_BASE_URL")

    # None = no timeout; callers apply their own deadline around the client.
    request_timeout_sec: Optional[float] = Field(default=None, alias="PTT_REQUEST_TIMEOUT_SEC")

    user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/120.0.0.0 Safari/537.36"
        ),
        alias="PTT_USER_AGENT",
    )

    # ---- Parsing ----
    # Post header times are written in Taiwan local time.
    utc_offset_hours: float = Field(default=8.0, alias="PTT_UTC_OFFSET_HOURS")

    # ---- run_fetch_once ----
    board: str = Field(default="Gossiping", alias="PTT_BOARD")
    max_posts_per_run: int = Field(default=5, alias="PTT_MAX_POSTS_PER_RUN")

    dump_html_on_empty: bool = Field(default=True, alias="PTT_DUMP_HTML_ON_EMPTY")
    dump_html_path: str = Field(default="debug_board_list.html", alias="PTT_DUMP_HTML_PATH")


def load_settings() -> ReaderSettings:
    return ReaderSettings()
