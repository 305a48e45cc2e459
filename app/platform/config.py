from pathlib import Path
from typing import Literal, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── App ─────────────────────────────────────
    APP_NAME: str = "A11y Evidence Crawler"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    DEBUG: bool = True

    # ── Browser ─────────────────────────────────
    CHROMEDRIVER_PATH: Optional[str] = None
    BROWSER_HEADLESS: bool = True
    VIEWPORT_WIDTH: int = 1920
    VIEWPORT_HEIGHT: int = 1080
    USER_AGENT: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
    )

    # ── Navigation ──────────────────────────────
    NAVIGATION_TIMEOUT_SECONDS: int = 30
    NETWORK_IDLE_MS: int = 500  # quiet window with no new resource requests

    # ── Logging ─────────────────────────────────
    LOG_DIR: str = "logs"

    class Config:
        env_file = str(Path(__file__).parent.parent.parent / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
