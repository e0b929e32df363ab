"""Environment-driven settings for the record portal."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(override=True)

RECORD_STORE_BACKEND = os.getenv("RECORD_STORE_BACKEND", "sqlite").lower()

DB_PATH = Path(
    os.getenv(
        "RECORDS_DB_PATH",
        str(Path(__file__).parent / "records" / "sped_records.db"),
    )
)

SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_KEY = os.getenv("SUPABASE_KEY")
STORE_TIMEOUT_SECONDS = float(os.getenv("STORE_TIMEOUT_SECONDS", "10"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
