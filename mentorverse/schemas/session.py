"""
Learning session schemas for MentorVerse.

Enumerations shared by the session engine and the presentation layer.
"""

from enum import Enum


class Phase(str, Enum):
    EXPLAINING = "explaining"
    PRACTICING = "practicing"
    TOPIC_QUIZ = "topic_quiz"
    COMPLETE = "complete"


class Outcome(str, Enum):
    """Outcome of an answered question."""
    PRAISE = "praise"
    CONSOLE = "console"


class AvatarMood(str, Enum):
    """Companion avatar state for UI display."""
    LOADING = "loading"
    EXPLAINING = "explaining"
    ASKING = "asking"
    PRAISING = "praising"
    CONSOLING = "consoling"


class SessionEvent(str, Enum):
    """Signals emitted by the session engine to its listeners."""
    PHASE_CHANGED = "phase_changed"
    POSITION_CHANGED = "position_changed"
    PRAISE = "praise"
    CONSOLE = "console"
    CONTENT_READY = "content_ready"
    CONTENT_FAILED = "content_failed"
    QUIZ_READY = "quiz_ready"
    QUIZ_FAILED = "quiz_failed"
    REMEDIATION_READY = "remediation_ready"
    COMPLETED = "completed"
