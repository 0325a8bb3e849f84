"""
Schema validation tests for MentorVerse.

Tests all Pydantic models to ensure they validate correctly.
"""

import pytest
from pydantic import ValidationError

from mentorverse.schemas import (
    # Course
    LEVELS,
    MCQ,
    SubtopicContent,
    QuizContent,
    Subtopic,
    Topic,
    Course,
    CourseOutline,
    # Progress
    Checkpoint,
    CourseProgress,
    # Session
    Phase,
    AvatarMood,
)

from conftest import make_content, make_course, make_quiz


class TestMCQ:
    """Test multiple choice questions."""

    def test_valid(self):
        mcq = MCQ(question="2 + 2?", options=["3", "4", "5", "6"], correct=1)
        assert mcq.correct_option == "4"
        assert mcq.explanation == ""
        assert mcq.is_correct(1)
        assert not mcq.is_correct(0)

    def test_exactly_four_options(self):
        with pytest.raises(ValidationError):
            MCQ(question="q", options=["a", "b", "c"], correct=0)
        with pytest.raises(ValidationError):
            MCQ(question="q", options=["a", "b", "c", "d", "e"], correct=0)

    def test_correct_index_in_range(self):
        with pytest.raises(ValidationError):
            MCQ(question="q", options=["a", "b", "c", "d"], correct=4)
        with pytest.raises(ValidationError):
            MCQ(question="q", options=["a", "b", "c", "d"], correct=-1)

    def test_no_coercion(self):
        with pytest.raises(ValidationError):
            MCQ(question="q", options=["a", "b", "c", "d"], correct="1")
        with pytest.raises(ValidationError):
            MCQ(question="q", options=["a", "b", 3, "d"], correct=1)

    def test_empty_question(self):
        with pytest.raises(ValidationError):
            MCQ(question="", options=["a", "b", "c", "d"], correct=0)


class TestContentSchemas:
    """Test lazily materialized content."""

    def test_subtopic_content_aliases(self):
        content = SubtopicContent.model_validate({
            "explanations": ["e"],
            "questions": [{"question": "q", "options": ["a", "b", "c", "d"], "correct": 0}],
            "keyTakeaways": ["k"],
        })
        assert content.key_takeaways == ["k"]
        assert content.examples == []

    def test_subtopic_content_requires_explanations_and_questions(self):
        with pytest.raises(ValidationError):
            SubtopicContent(explanations=[], questions=make_content().questions)
        with pytest.raises(ValidationError):
            SubtopicContent(explanations=["e"], questions=[])

    def test_quiz_requires_mcqs(self):
        with pytest.raises(ValidationError):
            QuizContent(mcqs=[])

    def test_generated_flag_requires_content(self):
        with pytest.raises(ValidationError):
            Subtopic(name="s", description="d", content_generated=True)
        subtopic = Subtopic.model_validate({
            "name": "s",
            "description": "d",
            "estimatedDuration": "10 min",
            "contentGenerated": True,
            "content": make_content().model_dump(),
        })
        assert subtopic.content_generated
        assert subtopic.estimated_duration == "10 min"

    def test_quiz_flag_requires_quiz(self):
        subtopics = [Subtopic(name="s", description="d")]
        with pytest.raises(ValidationError):
            Topic(name="t", description="d", subtopics=subtopics, quiz_generated=True)
        topic = Topic(name="t", description="d", subtopics=subtopics, quiz_content=make_quiz(), quiz_generated=True)
        assert topic.quiz_generated


class TestCourse:
    """Test course structure."""

    def test_topic_alias(self):
        topic = Topic.model_validate({
            "topic": "Addition",
            "description": "d",
            "subtopics": [{"name": "s", "description": "d"}],
        })
        assert topic.name == "Addition"
        assert topic.subtopic_names == ["s"]

    def test_requires_topics_and_subtopics(self):
        with pytest.raises(ValidationError):
            Course(title="Empty", topics=[])
        with pytest.raises(ValidationError):
            Topic(name="t", description="d", subtopics=[])

    def test_difficulty_normalized(self):
        course = make_course().model_copy()
        data = course.model_dump()
        data["difficulty"] = " Advanced "
        assert Course.model_validate(data).difficulty == "advanced"
        data["difficulty"] = "expert"
        with pytest.raises(ValidationError):
            Course.model_validate(data)

    def test_get_subtopic(self):
        course = make_course((2, 1))
        assert course.get_subtopic(0, 1).name == "Subtopic 1.2"
        with pytest.raises(IndexError):
            course.get_subtopic(1, 1)
        with pytest.raises(IndexError):
            course.get_topic(2)
        with pytest.raises(IndexError):
            course.get_topic(-1)

    def test_unknown_document_keys_ignored(self):
        data = make_course().model_dump()
        data["upvotes"] = 3
        course = Course.model_validate(data)
        assert "upvotes" not in course.model_dump()

    def test_json_round_trip_keeps_content(self):
        course = make_course((1,), quizzes=True)
        assert Course.model_validate_json(course.model_dump_json()) == course


class TestCourseOutline:
    """Test the outline returned by course generation."""

    OUTLINE = {
        "courseTitle": "Stats",
        "courseDescription": "Numbers",
        "topics": [
            {
                "topic": "Averages",
                "description": "Central tendency",
                "subtopics": [{"name": "Mean", "description": "Sum over count"}],
            }
        ],
    }

    def test_to_course(self):
        outline = CourseOutline.model_validate(self.OUTLINE)
        course = outline.to_course("alice", situation="Exam", level="intermediate")

        assert course.title == "Stats"
        assert course.difficulty == "intermediate"
        assert course.situation == "Exam"
        assert course.created_by == "alice"
        assert course.id is None
        assert course.topics[0].name == "Averages"
        assert not course.topics[0].quiz_generated
        assert not course.topics[0].subtopics[0].content_generated
        assert course.topics[0].subtopics[0].content is None

    def test_outline_difficulty_wins(self):
        outline = CourseOutline.model_validate({**self.OUTLINE, "difficulty": "ADVANCED"})
        assert outline.to_course("alice", level="beginner").difficulty == "advanced"

    def test_non_string_fields_rejected(self):
        bad = {**self.OUTLINE, "courseTitle": {"text": "Stats"}}
        with pytest.raises(ValidationError):
            CourseOutline.model_validate(bad)


class TestProgressSchemas:
    """Test progress-related schemas."""

    def test_checkpoint_defaults(self):
        assert Checkpoint() == Checkpoint(topic_index=0, subtopic_index=0, position=0)

    def test_checkpoint_rejects_negative(self):
        with pytest.raises(ValidationError):
            Checkpoint(topic_index=-1)
        with pytest.raises(ValidationError):
            Checkpoint(position=-2)

    def test_course_progress(self):
        progress = CourseProgress(user_id="alice", course_id="c1")
        assert progress.checkpoint == Checkpoint()


class TestSessionEnums:
    def test_values(self):
        assert [p.value for p in Phase] == ["explaining", "practicing", "topic_quiz", "complete"]
        assert AvatarMood("consoling") == AvatarMood.CONSOLING
        assert LEVELS == ("beginner", "intermediate", "advanced")
