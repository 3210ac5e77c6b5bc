import logging
import os
from typing import Literal

from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

env_path = os.getenv("ENV_PATH")
if not env_path:
    logger.debug("ENV_PATH is not set, using default values")


class Settings(BaseSettings):
    BASE_URL: str = "http://localhost:3000"
    HEADLESS: bool = True
    BROWSER_CHANNEL: str = "chromium"

    BUILD_MODE: Literal["webpack", "turbopack"] = "webpack"

    OVERLAY_TIMEOUT_MS: int = 5000
    TOAST_TIMEOUT_MS: int = 5000
    POLL_INTERVAL_MS: int = 100
    NO_OVERLAY_SETTLE_MS: int = 500
    SERVER_READY_TIMEOUT_S: float = 60.0

    UPDATE_SNAPSHOTS: bool = False
    CI: bool = False
    SNAPSHOT_DIR_NAME: str = "__overlay_snapshots__"

    ## Dev overlay DOM, rendered inside the open shadow root of <nextjs-portal>
    SELECTOR_DIALOG: str = "[data-nextjs-dialog]"
    SELECTOR_TOAST: str = "[data-nextjs-toast]"
    SELECTOR_DESCRIPTION: str = "#nextjs__container_errors_desc"
    SELECTOR_SOURCE: str = "[data-nextjs-codeframe]"
    SELECTOR_TERMINAL: str = "[data-nextjs-terminal]"
    SELECTOR_STACK_FRAME: str = "[data-nextjs-call-stack-frame]"
    SELECTOR_COUNT: str = "[data-nextjs-dialog-error-count]"
    SELECTOR_TITLE: str = "#nextjs__container_errors_label"

    class Config:
        env_file = env_path if env_path else None
        extra = "allow"


settings = Settings()


def reload_settings() -> Settings:
    """Re-read the environment into the shared ``settings`` object.

    Modules hold on to ``settings`` itself, so values are copied in place.
    """
    fresh = Settings()
    for name in Settings.model_fields:
        setattr(settings, name, getattr(fresh, name))
    return settings
