"""
Progress tracking schemas for MentorVerse.

Defines Pydantic models for learner progress including:
- Checkpoint (resumption point inside a course)
- Per-course progress record (one per user and course)
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class Checkpoint(BaseModel):
    topic_index: int = Field(default=0, ge=0)
    subtopic_index: int = Field(default=0, ge=0)
    position: int = Field(default=0, ge=0)  # explanation index within the subtopic


class CourseProgress(BaseModel):
    user_id: str
    course_id: str
    checkpoint: Checkpoint = Checkpoint()
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
