# offerte/config.py
# Process-level settings from the environment (and a local .env).
# Business settings (rates, margins, VAT) are per-user Instellingen records.

from __future__ import annotations

import os

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class AppConfig(BaseModel):
    app_name: str = os.getenv("OFFERTE_APP_NAME", "Hovenier Offerte API")
    environment: str = os.getenv("OFFERTE_ENV", "dev")
    log_level: str = os.getenv("OFFERTE_LOG_LEVEL", "INFO")
    log_json: bool = _flag("OFFERTE_LOG_JSON", "0")

    # seed the system-default correction factors when the API starts
    seed_on_startup: bool = _flag("OFFERTE_SEED_ON_STARTUP", "1")


config = AppConfig()
