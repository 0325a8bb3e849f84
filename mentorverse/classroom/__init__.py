"""
MentorVerse Classroom - Runtime components for studying generated courses.

This module provides:
- ContentStore: Courses and progress checkpoints in SQLite
- ContentMaterializer: On-demand content, quizzes and remediation
- SessionLoop: Timers and background calls for a session
- LearningSession: Session progression engine
"""

from .store import (
    ContentStore,
    CourseNotFoundError,
)

from .materializer import (
    ContentMaterializer,
)

from .events import (
    SessionLoop,
    TimerHandle,
)

from .session import (
    LearningSession,
    AnswerRecord,
    CheckpointWriter,
)

__all__ = [
    # Store
    "ContentStore",
    "CourseNotFoundError",
    # Materializer
    "ContentMaterializer",
    # Events
    "SessionLoop",
    "TimerHandle",
    # Session
    "LearningSession",
    "AnswerRecord",
    "CheckpointWriter",
]
