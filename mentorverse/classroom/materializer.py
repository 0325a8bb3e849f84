"""
ContentMaterializer - Generates course material the first time it is needed.

Bridges the learning session to the generation service and the content
store. Generated flags on subtopics and topics make materialization
idempotent: a call for something the store already holds returns the
stored copy without calling the generator, and a failed generation leaves
the flag untouched so the next request retries.
"""

import logging
from typing import Optional

from mentorverse.generation import GenerationService
from mentorverse.schemas import LEVELS, Course, QuizContent, SubtopicContent, normalize_level

from .store import ContentStore, CourseNotFoundError

logger = logging.getLogger(__name__)


class ContentMaterializer:
    """On-demand content, quizzes, remediation and course creation."""

    def __init__(self, store: ContentStore, generator: GenerationService):
        self.store = store
        self.generator = generator

    def _load_course(self, course_id: str) -> Course:
        course = self.store.read_course(course_id)
        if course is None:
            raise CourseNotFoundError(f"Course not found: {course_id}")
        return course

    def materialize_subtopic_content(
        self,
        course_id: str,
        topic_index: int,
        subtopic_index: int,
    ) -> SubtopicContent:
        """
        Generate and store content for one subtopic.

        Content the store already holds is returned as is. A caller working
        from a stale copy of the course still gets the stored content.

        Raises:
            CourseNotFoundError: No such course
            GenerationError: Generation failed; nothing is stored
        """
        course = self._load_course(course_id)
        topic = course.get_topic(topic_index)
        subtopic = course.get_subtopic(topic_index, subtopic_index)
        if subtopic.content_generated:
            logger.info(f"Subtopic {topic_index}/{subtopic_index} of {course_id} already generated")
            return subtopic.content

        content = self.generator.subtopic_content(course, topic, subtopic, course.difficulty)
        saved = self.store.save_subtopic_content(course_id, topic_index, subtopic_index, content)
        # A concurrent request may have stored first; its content wins
        content = saved.get_subtopic(topic_index, subtopic_index).content
        logger.info(
            f"Materialized subtopic {topic_index}/{subtopic_index} of {course_id}: "
            f"{len(content.explanations)} explanations, {len(content.questions)} questions"
        )
        return content

    def materialize_topic_quiz(self, course_id: str, topic_index: int) -> QuizContent:
        """
        Generate and store the quiz for one topic.

        A quiz the store already holds is returned as is.

        Raises:
            CourseNotFoundError: No such course
            GenerationError: Generation failed; nothing is stored
        """
        course = self._load_course(course_id)
        topic = course.get_topic(topic_index)
        if topic.quiz_generated:
            logger.info(f"Quiz for topic {topic_index} of {course_id} already generated")
            return topic.quiz_content

        quiz = self.generator.topic_quiz(course, topic, topic.subtopic_names, course.difficulty)
        quiz = self.store.save_topic_quiz(course_id, topic_index, quiz).get_topic(topic_index).quiz_content
        logger.info(f"Materialized quiz for topic {topic_index} of {course_id}: {len(quiz.mcqs)} MCQs")
        return quiz

    def explain_wrong_answer(
        self,
        question: str,
        correct_text: str,
        chosen_text: str,
        context: list[str],
    ) -> str:
        """Generate remediation text for a missed question."""
        return self.generator.remediate(question, correct_text, chosen_text, context)

    def generate_course(
        self,
        user_id: str,
        topic: str,
        situation: Optional[str] = None,
        level: str = "beginner",
    ) -> tuple[Course, bool]:
        """
        Generate a course outline and store it.

        Returns:
            (course, is_existing) where is_existing is True when the user
            already owns a course with the generated title
        """
        if not topic or not topic.strip():
            raise ValueError("Topic is required")
        level = normalize_level(level) or "beginner"
        if level not in LEVELS:
            raise ValueError(f"Invalid level: {level}")

        outline = self.generator.outline(topic.strip(), situation, level)

        existing = self.store.find_course_by_title(user_id, outline.course_title)
        if existing is not None:
            logger.info(f"Course {existing.title!r} already exists for {user_id}, reusing {existing.id}")
            return existing, True

        course = self.store.create_course(outline.to_course(user_id, situation, level))
        logger.info(f"Created course {course.title!r} ({course.id}) with {len(course.topics)} topics")
        return course, False

    def clarify_doubt(self, context: list[str], doubt: str) -> str:
        """Answer a learner's question about the material in front of them."""
        if not doubt or not doubt.strip():
            raise ValueError("Doubt is required")
        context = [c for c in context if c and c.strip()]
        if not context:
            raise ValueError("Context is required")
        return self.generator.clarify_doubt(context, doubt.strip())
