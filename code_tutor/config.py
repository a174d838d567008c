"""Global configuration for Code Tutor."""

import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

# Data and logs live under one root (defaults to the working directory)
DATA_DIR = Path(os.getenv("CODE_TUTOR_HOME", ".")) / "code-tutor"

# Logging
LOG_DIR = DATA_DIR / "logs"  # Created by logger.setup_logging()
LOG_LEVEL = os.getenv("CODE_TUTOR_LOG_LEVEL", "INFO").upper()

# Conversation store
STORE_DB = os.getenv("CODE_TUTOR_STORE_DB", str(DATA_DIR / "conversations.db"))
SESSION_MAX_AGE_DAYS = 30
SESSION_HISTORY_CAP = 50  # Messages kept in a student context snapshot

# Learning level for students without a saved profile
DEFAULT_LEARNING_LEVEL = os.getenv("CODE_TUTOR_DEFAULT_LEVEL", "beginner")

# AI backend (leave TUTOR_API_URL unset to use the offline placeholder tutor)
TUTOR_API_URL = os.getenv("TUTOR_API_URL")
TUTOR_API_KEY = os.getenv("TUTOR_API_KEY")
TUTOR_API_TIMEOUT = float(os.getenv("TUTOR_API_TIMEOUT", "30"))

# --- Pipeline limits (fixed, not environment-driven) ---

# Prompt budgeting
MAX_PROMPT_TOKENS = 4000
CHARS_PER_TOKEN = 4
MAX_HISTORY_MESSAGES = 10
MAX_HISTORY_PREVIEW = 200

# Sanitiser
MAX_INPUT_LENGTH = 5000
REDACTION_TOKEN = "[REDACTED]"
TRUNCATION_NOTICE = "\n\n[Message truncated for length - please ask shorter questions]"

# Accessibility audit
LONG_CODE_BLOCK_LINES = 50
MAX_HEADING_LEVEL = 6
