"""Configuration and settings."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Paths
PROJECT_ROOT = Path(__file__).resolve().parent.parent
DATA_DIR = Path(os.getenv("DB_DIR", str(PROJECT_ROOT / "data")))
OUTPUT_DIR = PROJECT_ROOT / "output"

# Ensure directories exist
DATA_DIR.mkdir(parents=True, exist_ok=True)
OUTPUT_DIR.mkdir(parents=True, exist_ok=True)

# Database
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{DATA_DIR / 'uid_ops.sqlite'}")

# HTTP server
PORT = int(os.getenv("PORT", "4000"))
# Comma-separated origins; "*" allows any
ALLOWED_ORIGIN = os.getenv("ALLOWED_ORIGIN", "*")
ALLOWED_ORIGINS = [o.strip() for o in ALLOWED_ORIGIN.split(",") if o.strip()] or ["*"]

# Business calendar: "today" and week keys are computed in this zone
BUSINESS_TIMEZONE = os.getenv("BUSINESS_TIMEZONE", "America/Chicago")

# Logging
LOG_DIR = OUTPUT_DIR / "logs"
LOG_FILE = LOG_DIR / "app.jsonl"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
VERBOSE_LOGGING = os.getenv("VERBOSE_LOGGING", "false").lower() == "true"
LOG_FILE_ENABLED = os.getenv("LOG_FILE_ENABLED", "true").lower() == "true"

# Scan pulse stream (SSE)
SSE_KEEPALIVE_SECONDS = float(os.getenv("SSE_KEEPALIVE_SECONDS", "15"))
SSE_QUEUE_MAX = int(os.getenv("SSE_QUEUE_MAX", "100"))

# Weekly plans
PLAN_WEEKS_LIMIT = int(os.getenv("PLAN_WEEKS_LIMIT", "52"))
