"""
Course schemas for MentorVerse.

Defines Pydantic models for generated courses including:
- Course outline returned by course generation
- Topics and subtopics with lazily materialized content
- Practice questions and topic quizzes (MCQ-shaped)

Attribute names are snake_case; the camelCase keys produced by the
generation service are accepted as aliases.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    StrictStr,
    field_validator,
    model_validator,
)


Level = Literal["beginner", "intermediate", "advanced"]

LEVELS = ("beginner", "intermediate", "advanced")
OPTIONS_PER_QUESTION = 4


def normalize_level(v):
    """Lower-case a difficulty label; anything else is left to validation."""
    if isinstance(v, str):
        return v.strip().lower()
    return v


class _Schema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# -----------------------------------------------------------------------------
# Questions
# -----------------------------------------------------------------------------

class MCQ(_Schema):
    """Multiple choice question with exactly four options and one correct index."""
    question: StrictStr = Field(..., min_length=1)
    options: list[StrictStr] = Field(..., min_length=OPTIONS_PER_QUESTION, max_length=OPTIONS_PER_QUESTION)
    correct: StrictInt = Field(..., ge=0, le=OPTIONS_PER_QUESTION - 1)
    explanation: StrictStr = ""  # built-in remediation, may be empty

    @property
    def correct_option(self) -> str:
        return self.options[self.correct]

    def is_correct(self, choice: int) -> bool:
        """Strict index equality, no partial credit."""
        return choice == self.correct


# -----------------------------------------------------------------------------
# Lazily materialized content
# -----------------------------------------------------------------------------

class SubtopicContent(_Schema):
    explanations: list[StrictStr] = Field(..., min_length=1)
    questions: list[MCQ] = Field(..., min_length=1)  # practice questions
    examples: list[StrictStr] = []
    key_takeaways: list[StrictStr] = Field(default=[], alias="keyTakeaways")


class QuizContent(_Schema):
    mcqs: list[MCQ] = Field(..., min_length=1)  # quiz for the whole topic


# -----------------------------------------------------------------------------
# Course structure
# -----------------------------------------------------------------------------

class Subtopic(_Schema):
    name: str
    description: str
    estimated_duration: str = Field(default="", alias="estimatedDuration")
    content: Optional[SubtopicContent] = None
    content_generated: bool = Field(default=False, alias="contentGenerated")

    @model_validator(mode="after")
    def generated_implies_content(self):
        if self.content_generated and self.content is None:
            raise ValueError("content_generated is set but content is missing")
        return self


class Topic(_Schema):
    name: str = Field(..., alias="topic")
    description: str
    duration: str = ""
    subtopics: list[Subtopic] = Field(..., min_length=1)
    quiz_content: Optional[QuizContent] = Field(default=None, alias="quizContent")
    quiz_generated: bool = Field(default=False, alias="quizGenerated")

    @model_validator(mode="after")
    def generated_implies_quiz(self):
        if self.quiz_generated and self.quiz_content is None:
            raise ValueError("quiz_generated is set but quiz_content is missing")
        return self

    @property
    def subtopic_names(self) -> list[str]:
        return [st.name for st in self.subtopics]


class Course(_Schema):
    id: Optional[str] = None  # assigned by the store
    title: str = Field(..., min_length=1)
    description: str = Field(default="", alias="courseDescription")
    total_duration: str = Field(default="", alias="totalDuration")
    difficulty: Level = "beginner"
    situation: str = ""
    tags: list[str] = []
    topics: list[Topic] = Field(..., min_length=1)
    created_by: str = ""
    created_at: Optional[datetime] = None

    @field_validator("difficulty", mode="before")
    @classmethod
    def difficulty_lower(cls, v):
        return normalize_level(v)

    def get_topic(self, topic_index: int) -> Topic:
        if not 0 <= topic_index < len(self.topics):
            raise IndexError(f"Invalid topic index: {topic_index}")
        return self.topics[topic_index]

    def get_subtopic(self, topic_index: int, subtopic_index: int) -> Subtopic:
        topic = self.get_topic(topic_index)
        if not 0 <= subtopic_index < len(topic.subtopics):
            raise IndexError(f"Invalid subtopic index: {topic_index}/{subtopic_index}")
        return topic.subtopics[subtopic_index]


# -----------------------------------------------------------------------------
# Outline returned by course generation
# -----------------------------------------------------------------------------

class SubtopicOutline(_Schema):
    name: StrictStr = Field(..., min_length=1)
    description: StrictStr
    estimated_duration: StrictStr = Field(default="", alias="estimatedDuration")


class TopicOutline(_Schema):
    topic: StrictStr = Field(..., min_length=1)
    description: StrictStr
    duration: StrictStr = ""
    subtopics: list[SubtopicOutline] = Field(..., min_length=1)


class CourseOutline(_Schema):
    course_title: StrictStr = Field(..., min_length=1, alias="courseTitle")
    course_description: StrictStr = Field(default="", alias="courseDescription")
    total_duration: StrictStr = Field(default="", alias="totalDuration")
    difficulty: Optional[Level] = None
    tags: list[StrictStr] = []
    topics: list[TopicOutline] = Field(..., min_length=1)

    @field_validator("difficulty", mode="before")
    @classmethod
    def difficulty_lower(cls, v):
        return normalize_level(v)

    def to_course(
        self,
        created_by: str,
        situation: Optional[str] = None,
        level: str = "beginner",
    ) -> Course:
        """Build an un-materialized course: no content, every generated flag false."""
        return Course(
            title=self.course_title,
            description=self.course_description,
            total_duration=self.total_duration,
            difficulty=self.difficulty or level,
            situation=situation or "",
            tags=list(self.tags),
            topics=[
                Topic(
                    name=t.topic,
                    description=t.description,
                    duration=t.duration,
                    subtopics=[
                        Subtopic(
                            name=st.name,
                            description=st.description,
                            estimated_duration=st.estimated_duration,
                        )
                        for st in t.subtopics
                    ],
                )
                for t in self.topics
            ],
            created_by=created_by,
        )
