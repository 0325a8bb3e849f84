"""
MentorVerse Schemas - Pydantic models for the course learning platform.

This module exports all schema classes for:
- Course: outline, topics, subtopics, generated content, quizzes
- Progress: checkpoints and per-course progress
- Session: phases, outcomes and avatar moods of a learning session
"""

# Course schemas
from .course import (
    Level,
    LEVELS,
    OPTIONS_PER_QUESTION,
    normalize_level,
    MCQ,
    SubtopicContent,
    QuizContent,
    Subtopic,
    Topic,
    Course,
    SubtopicOutline,
    TopicOutline,
    CourseOutline,
)

# Progress schemas
from .progress import (
    Checkpoint,
    CourseProgress,
)

# Session schemas
from .session import (
    Phase,
    Outcome,
    AvatarMood,
    SessionEvent,
)

__all__ = [
    # Course
    'Level',
    'LEVELS',
    'OPTIONS_PER_QUESTION',
    'normalize_level',
    'MCQ',
    'SubtopicContent',
    'QuizContent',
    'Subtopic',
    'Topic',
    'Course',
    'SubtopicOutline',
    'TopicOutline',
    'CourseOutline',
    # Progress
    'Checkpoint',
    'CourseProgress',
    # Session
    'Phase',
    'Outcome',
    'AvatarMood',
    'SessionEvent',
]
