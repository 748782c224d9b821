"""Configuration management with environment variable loading and database URL building."""

import os
from typing import Optional
from pathlib import Path

def load_env_file(env_file: Optional[Path] = None):
    """Load environment variables from .env file if it exists."""
    env_file = env_file or Path.cwd() / ".env"
    if env_file.exists():
        with open(env_file, 'r') as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith('#') and '=' in line:
                    key, value = line.split('=', 1)
                    if key not in os.environ:  # Don't override existing env vars
                        os.environ[key] = value

def get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    """Get environment variable with optional default."""
    return os.environ.get(name, default)

def build_db_url() -> Optional[str]:
    """Build a database URL from ROWDRIVEN_DB_URL or DB_HOST, DB_PORT, DB_NAME, DB_USER, DB_PASSWORD."""
    url = get_env(ENV_DB_URL)
    if url:
        return url

    host = get_env("DB_HOST")
    port = get_env("DB_PORT")
    name = get_env("DB_NAME")
    user = get_env("DB_USER")
    password = get_env("DB_PASSWORD")

    if all([host, port, name, user, password]):
        return f"postgresql://{user}:{password}@{host}:{port}/{name}"
    return None

def csv_delimiter() -> str:
    """Delimiter used by the delimited-text loader unless one is passed explicitly."""
    return get_env(ENV_CSV_DELIMITER, DEFAULT_CSV_DELIMITER)

# Core Configuration Constants
DEFAULT_OUT_DIR = "./rowdriven_runs"
"""str: Default directory for per-test-case outcome reports."""

ENV_DB_URL = "ROWDRIVEN_DB_URL"
"""str: Environment variable name for complete database URL override."""

ENV_CSV_DELIMITER = "ROWDRIVEN_CSV_DELIMITER"
"""str: Environment variable overriding the default delimiter."""

DEFAULT_CSV_DELIMITER = ","

# Reserved row keys used on the write-back path
ACTUAL_RESULT = "actualResult"
TEST_STATUS = "testStatus"
RESERVED_KEYS = (ACTUAL_RESULT, TEST_STATUS)

# testStatus labels
STATUS_PASSED = "PASSED"
STATUS_FAILED = "FAILED"
STATUS_SKIPPED = "SKIPPED"

# Load .env file on import
load_env_file()
