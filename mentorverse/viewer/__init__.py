"""
MentorVerse Viewer - Rendering components for the learning session.

This module provides:
- Explanation and question cards
- Progress bar, avatar line and syllabus
- Completion view
"""

from .session import (
    AVATAR_LINES,
    SYLLABUS_MARKS,
    get_session_css,
    render_progress,
    render_avatar_message,
    render_explanation,
    render_question,
    render_feedback,
    render_key_takeaways,
    syllabus_status,
    render_syllabus,
    render_completion,
)

__all__ = [
    "AVATAR_LINES",
    "SYLLABUS_MARKS",
    "get_session_css",
    "render_progress",
    "render_avatar_message",
    "render_explanation",
    "render_question",
    "render_feedback",
    "render_key_takeaways",
    "syllabus_status",
    "render_syllabus",
    "render_completion",
]
