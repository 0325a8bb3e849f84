"""
GenerationService - Course content generation over an LLM client.

Provides:
- Course outlines for a requested subject
- Subtopic content (explanations, practice questions)
- Topic quizzes
- Remediation text for wrong answers
- Doubt clarification

Every structured reply is validated against the course schemas; anything
that does not validate raises GenerationError.
"""

import logging
from pathlib import Path
from typing import Optional, Protocol

from mentorverse.schemas import Course, CourseOutline, QuizContent, Subtopic, SubtopicContent, Topic
from mentorverse.utils.prompt_loader import format_prompt, load_prompt

from .errors import GenerationError
from .parsing import parse_model

logger = logging.getLogger(__name__)


class TextGenerator(Protocol):
    def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        json_mode: bool = False,
        temperature: Optional[float] = None,
    ) -> str:
        ...


class GenerationService:
    """Prompt building and response validation for every generation call."""

    def __init__(self, client: TextGenerator, prompts_dir: Optional[Path] = None):
        self.client = client
        self.prompts_dir = prompts_dir
        self._prompts: dict[str, dict] = {}

    def _prompt(self, name: str) -> dict:
        if name not in self._prompts:
            self._prompts[name] = load_prompt(name, self.prompts_dir)
        return self._prompts[name]

    def _call(self, name: str, **values) -> str:
        prompt = self._prompt(name)
        meta = prompt.get("meta", {})
        user_prompt = format_prompt(prompt["user_template"], **values)
        try:
            return self.client.generate(
                prompt["system"],
                user_prompt,
                json_mode=bool(meta.get("json", False)),
                temperature=meta.get("temperature"),
            )
        except GenerationError:
            raise
        except Exception as e:
            raise GenerationError(f"{name} generation failed: {e}") from e

    # -------------------------------------------------------------------------
    # Structured content
    # -------------------------------------------------------------------------

    def outline(self, topic: str, situation: Optional[str] = None, level: str = "beginner") -> CourseOutline:
        """Generate a course outline (topics and subtopics, no content)."""
        logger.info(f"Generating course outline for {topic!r} ({level})")
        text = self._call(
            "course_outline",
            topic=topic,
            situation_line=f"Situation: {situation}\n" if situation else "",
            level=level or "beginner",
        )
        return parse_model(text, CourseOutline)

    def subtopic_content(
        self,
        course: Course,
        topic: Topic,
        subtopic: Subtopic,
        level: Optional[str] = None,
    ) -> SubtopicContent:
        """Generate explanations and practice questions for one subtopic."""
        logger.info(f"Generating content for subtopic {subtopic.name!r}")
        text = self._call(
            "subtopic_content",
            course_title=course.title,
            topic_title=topic.name,
            subtopic_title=subtopic.name,
            subtopic_description=subtopic.description,
            level=level or course.difficulty,
        )
        return parse_model(text, SubtopicContent)

    def topic_quiz(
        self,
        course: Course,
        topic: Topic,
        subtopic_names: list[str],
        level: Optional[str] = None,
    ) -> QuizContent:
        """Generate the quiz covering a whole topic."""
        logger.info(f"Generating quiz for topic {topic.name!r}")
        text = self._call(
            "topic_quiz",
            course_title=course.title,
            topic_title=topic.name,
            topic_description=topic.description,
            subtopic_titles=", ".join(subtopic_names),
            level=level or course.difficulty,
        )
        return parse_model(text, QuizContent)

    # -------------------------------------------------------------------------
    # Free text
    # -------------------------------------------------------------------------

    def remediate(self, question: str, correct_text: str, chosen_text: str, context: list[str]) -> str:
        """Explain a wrong answer in two or three encouraging sentences."""
        text = self._call(
            "remediation",
            context=" ".join(c for c in context if c),
            question=question,
            correct_answer=correct_text,
            student_answer=chosen_text,
        )
        return _require_text(text, "remediation")

    def clarify_doubt(self, context: list[str], doubt: str) -> str:
        """Answer a learner's free-form question about the current material."""
        text = self._call(
            "doubt",
            context=" ".join(c for c in context if c),
            doubt=doubt,
        )
        return _require_text(text, "doubt clarification")


def _require_text(text: Optional[str], what: str) -> str:
    if not text or not text.strip():
        raise GenerationError(f"Empty {what} response")
    return text.strip()
