"""Student context manager.

Tracks one student's learning level, preferences and current session on top
of the conversation store. Every call reads from the store, so callers always
get a fresh snapshot and never share mutable state with the manager.
"""

import time
from dataclasses import asdict, replace
from typing import Optional, Union

from code_tutor import config
from code_tutor.logger import logger
from code_tutor.store import ConversationStore
from code_tutor.types import (
    ConversationMessage,
    LearningLevel,
    Role,
    StudentContext,
    StudentPreferences,
)


DEFAULT_STUDENT_ID = "default"


class StudentContextManager:
    """Per-student state: level, preferences, session and history."""

    def __init__(
        self,
        store: ConversationStore,
        default_level: Union[LearningLevel, str, None] = None,
        student_id: str = DEFAULT_STUDENT_ID
    ):
        self.store = store
        self.default_level = LearningLevel(default_level or config.DEFAULT_LEARNING_LEVEL)
        self.student_id = student_id

    def get_context(self, session_id: Optional[str] = None) -> StudentContext:
        """Snapshot of the student's state with the last SESSION_HISTORY_CAP messages.

        Args:
            session_id: Session to load history from (defaults to the current one)
        """
        profile = self._load_profile()
        session_id = session_id or profile["session_id"]

        return StudentContext(
            session_id=session_id,
            learning_level=LearningLevel(profile["learning_level"]),
            conversation_history=self.store.get_recent(session_id, config.SESSION_HISTORY_CAP),
            preferences=StudentPreferences(**profile["preferences"]),
            last_updated_at=profile["last_updated_at"],
        )

    def add_message(
        self,
        role: Union[Role, str],
        content: str,
        session_id: Optional[str] = None
    ) -> ConversationMessage:
        """Persist one turn and touch the profile's update time."""
        profile = self._load_profile()
        message = ConversationMessage(
            role=Role(role),
            content=content,
            timestamp=int(time.time()),
        )
        self.store.save(session_id or profile["session_id"], message)
        self._save_profile(profile)
        return message

    def get_recent_history(self, limit: int = 10) -> list[ConversationMessage]:
        profile = self._load_profile()
        return self.store.get_recent(profile["session_id"], limit)

    def update_learning_level(self, level: Union[LearningLevel, str]) -> LearningLevel:
        """Change the learning level.

        Raises:
            ValueError: if ``level`` is not a known learning level
        """
        level = LearningLevel(level)
        profile = self._load_profile()
        profile["learning_level"] = level.value
        self._save_profile(profile)
        logger.info(f"Learning level set to {level.value}")
        return level

    def update_preferences(self, **changes) -> StudentPreferences:
        """Merge ``changes`` into the stored preferences.

        Raises:
            TypeError: for an unknown preference name
        """
        profile = self._load_profile()
        preferences = replace(StudentPreferences(**profile["preferences"]), **changes)
        profile["preferences"] = asdict(preferences)
        self._save_profile(profile)
        return preferences

    def clear_history(self) -> None:
        """Drop the current session's messages, keeping level and preferences."""
        profile = self._load_profile()
        removed = self.store.clear(profile["session_id"])
        self._save_profile(profile)
        logger.info(f"Cleared {removed} message(s) from {profile['session_id']}")

    def start_new_session(self) -> str:
        """Switch to a fresh session; earlier sessions stay in the store."""
        profile = self._load_profile()
        profile["session_id"] = self.store.new_session_id()
        self._save_profile(profile)
        logger.info(f"Started session {profile['session_id']}")
        return profile["session_id"]

    def reset_all(self) -> None:
        """Delete every conversation and profile."""
        self.store.delete_all()
        logger.info("Student data reset")

    # -- profile persistence -------------------------------------------------

    def _load_profile(self) -> dict:
        profile = self.store.load_profile(self.student_id)
        if profile is not None:
            return profile

        profile = {
            "session_id": self.store.new_session_id(),
            "learning_level": self.default_level.value,
            "preferences": asdict(StudentPreferences()),
            "last_updated_at": int(time.time()),
        }
        self._save_profile(profile)
        logger.debug(f"Created profile for {self.student_id}")
        return profile

    def _save_profile(self, profile: dict) -> None:
        profile["last_updated_at"] = int(time.time())
        self.store.save_profile(
            self.student_id,
            session_id=profile["session_id"],
            learning_level=profile["learning_level"],
            preferences=profile["preferences"],
            last_updated_at=profile["last_updated_at"],
        )
