"""
Application settings.

Values come from environment variables so the same code runs locally
(SQLite file) and in production (DATABASE_URL pointing at PostgreSQL).
"""
import os

from app.services.dose_rules import DEFAULT_DOSE_CALDO_L_HA

APP_NAME = os.environ.get("APP_NAME", "AgroJobs")

DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///./agrojobs.db")

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
LOG_JSON = os.environ.get("LOG_JSON", "false").lower() == "true"

DEFAULT_CALDO_RATE = float(os.environ.get("DEFAULT_DOSE_CALDO_L_HA", DEFAULT_DOSE_CALDO_L_HA))
