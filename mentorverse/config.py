"""
Configuration for MentorVerse.

Settings come from the environment (a local .env file is loaded first).
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


DEFAULT_MODEL = "gemini-2.0-flash"
DEFAULT_DATA_DIR = Path.home() / ".mentorverse"
DEFAULT_DB_PATH = DEFAULT_DATA_DIR / "mentorverse.db"
DEFAULT_USER_ID = "default"  # single-user mode

# Learning session timing (seconds)
PRACTICE_ADVANCE_DELAY = 3.0
QUIZ_ADVANCE_DELAY = 4.0  # longer, to leave time to read a remediation message
CHECKPOINT_DEBOUNCE = 1.0

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


@dataclass(frozen=True)
class Settings:
    gemini_api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    db_path: Path = DEFAULT_DB_PATH
    user_id: str = DEFAULT_USER_ID
    log_level: str = "INFO"
    api_sleep: float = 0.0
    practice_delay: float = PRACTICE_ADVANCE_DELAY
    quiz_delay: float = QUIZ_ADVANCE_DELAY
    checkpoint_delay: float = CHECKPOINT_DEBOUNCE

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables."""
        db_path = os.getenv("MENTORVERSE_DB")
        return cls(
            gemini_api_key=os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_GEMINI_API_KEY"),
            model=os.getenv("MENTORVERSE_MODEL", DEFAULT_MODEL),
            db_path=Path(db_path).expanduser() if db_path else DEFAULT_DB_PATH,
            user_id=os.getenv("MENTORVERSE_USER", DEFAULT_USER_ID),
            log_level=os.getenv("MENTORVERSE_LOG_LEVEL", "INFO").upper(),
            api_sleep=float(os.getenv("MENTORVERSE_API_SLEEP", "0")),
        )

    def validate(self) -> None:
        """
        Check settings needed to talk to the generation service.

        Raises:
            ValueError: If the API key is missing
        """
        if not self.gemini_api_key:
            raise ValueError("GEMINI_API_KEY not set. Check your .env file.")
