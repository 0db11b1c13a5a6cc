import os
from pathlib import Path

from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parents[1]

# Load .env from project root
load_dotenv(dotenv_path=ROOT_DIR / ".env")

DATA_DIR = ROOT_DIR / "data"
SCHEMA_PATH = Path(__file__).resolve().parent / "schema.sql"

ONCALL_DB_PATH = Path(os.getenv("ONCALL_DB_PATH", str(DATA_DIR / "oncall.sqlite")))

# Coverage endpoint looks this many days ahead when no endDate is given
COVERAGE_DEFAULT_DAYS = int(os.getenv("COVERAGE_DEFAULT_DAYS", "30"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "CORS_ORIGINS",
        "http://localhost:3000,http://127.0.0.1:3000",
    ).split(",")
    if origin.strip()
]
