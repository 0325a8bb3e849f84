"""
LearningSession - Moves a learner through one course.

Sequence per subtopic: explanations, then practice questions, then the
topic quiz. After the last subtopic of the last topic the session is
complete.

Side effects run through a SessionLoop:
- Subtopic content and topic quizzes are materialized the first time
  they are needed (a loading flag is visible while a request is in flight)
- Wrong answers without a built-in explanation request remediation text
- Answered questions auto-advance after a short reading delay
- Cursor changes persist a checkpoint once the cursor has been still for
  the debounce window

Every transition bumps a version number and cancels the pending
auto-advance. Timer and remediation callbacks carry the version they
were scheduled under and do nothing once it is out of date.
"""

import logging
from dataclasses import dataclass
from functools import partial
from typing import Callable, Optional, Protocol

from mentorverse.config import CHECKPOINT_DEBOUNCE, PRACTICE_ADVANCE_DELAY, QUIZ_ADVANCE_DELAY
from mentorverse.schemas import (
    MCQ,
    AvatarMood,
    Checkpoint,
    Course,
    CourseProgress,
    Outcome,
    Phase,
    QuizContent,
    SessionEvent,
    Subtopic,
    SubtopicContent,
    Topic,
)

from .events import SessionLoop, TimerHandle
from .materializer import ContentMaterializer

logger = logging.getLogger(__name__)

Listener = Callable[[SessionEvent, "LearningSession"], None]


class CheckpointWriter(Protocol):
    def upsert_checkpoint(self, user_id: str, course_id: str, checkpoint: Checkpoint) -> CourseProgress:
        ...


@dataclass
class AnswerRecord:
    """Answer to the current practice question or quiz MCQ."""
    choice: int
    outcome: Outcome
    remediation: Optional[str] = None  # built-in explanation or generated text

    @property
    def is_correct(self) -> bool:
        return self.outcome == Outcome.PRAISE


class LearningSession:
    """
    Session progression engine for one learner and one course.

    Args:
        course: Course being studied (updated locally as content arrives)
        materializer: Source of generated content and remediation
        checkpoints: Where resumption points are persisted
        user_id: Learner ID
        loop: Loop that runs timers and background calls
        practice_delay: Seconds before an answered practice question advances
        quiz_delay: Seconds before an answered quiz MCQ advances
        checkpoint_delay: Quiet period before a checkpoint is written
        start: Resume from this checkpoint instead of the beginning
    """

    def __init__(
        self,
        course: Course,
        materializer: ContentMaterializer,
        checkpoints: CheckpointWriter,
        user_id: str,
        loop: SessionLoop,
        *,
        practice_delay: float = PRACTICE_ADVANCE_DELAY,
        quiz_delay: float = QUIZ_ADVANCE_DELAY,
        checkpoint_delay: float = CHECKPOINT_DEBOUNCE,
        start: Optional[Checkpoint] = None,
    ):
        self.course = course
        self.materializer = materializer
        self.checkpoints = checkpoints
        self.user_id = user_id
        self.loop = loop
        self.practice_delay = practice_delay
        self.quiz_delay = quiz_delay
        self.checkpoint_delay = checkpoint_delay

        self._phase = Phase.EXPLAINING
        self._topic_index = 0
        self._subtopic_index = 0
        self._explanation_index = 0
        self._question_index = 0
        self._mcq_index = 0
        self._answer: Optional[AnswerRecord] = None

        self._version = 0
        self._advance_timer: Optional[TimerHandle] = None
        self._checkpoint_timer: Optional[TimerHandle] = None
        self._in_flight: set[tuple] = set()
        self._remediation_version: Optional[int] = None
        self._listeners: list[Listener] = []
        self._closed = False

        if not course.topics:
            self._phase = Phase.COMPLETE
            return

        if start is not None:
            course.get_subtopic(start.topic_index, start.subtopic_index)
            self._topic_index = start.topic_index
            self._subtopic_index = start.subtopic_index
            self._explanation_index = start.position
            self._clamp_explanation()

        self._ensure_content()

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def topic_index(self) -> int:
        return self._topic_index

    @property
    def subtopic_index(self) -> int:
        return self._subtopic_index

    @property
    def explanation_index(self) -> int:
        return self._explanation_index

    @property
    def question_index(self) -> int:
        return self._question_index

    @property
    def mcq_index(self) -> int:
        return self._mcq_index

    @property
    def answer(self) -> Optional[AnswerRecord]:
        return self._answer

    @property
    def is_complete(self) -> bool:
        return self._phase == Phase.COMPLETE

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def version(self) -> int:
        return self._version

    @property
    def current_topic(self) -> Optional[Topic]:
        if not self.course.topics:
            return None
        return self.course.topics[self._topic_index]

    @property
    def current_subtopic(self) -> Optional[Subtopic]:
        topic = self.current_topic
        return topic.subtopics[self._subtopic_index] if topic else None

    @property
    def current_content(self) -> Optional[SubtopicContent]:
        subtopic = self.current_subtopic
        return subtopic.content if subtopic else None

    @property
    def current_quiz(self) -> Optional[QuizContent]:
        topic = self.current_topic
        return topic.quiz_content if topic else None

    @property
    def current_explanation(self) -> Optional[str]:
        content = self.current_content
        if content is None or self._explanation_index >= len(content.explanations):
            return None
        return content.explanations[self._explanation_index]

    @property
    def current_question(self) -> Optional[MCQ]:
        content = self.current_content
        if self._phase != Phase.PRACTICING or content is None:
            return None
        if self._question_index >= len(content.questions):
            return None
        return content.questions[self._question_index]

    @property
    def current_mcq(self) -> Optional[MCQ]:
        quiz = self.current_quiz
        if self._phase != Phase.TOPIC_QUIZ or quiz is None:
            return None
        if self._mcq_index >= len(quiz.mcqs):
            return None
        return quiz.mcqs[self._mcq_index]

    @property
    def is_loading_content(self) -> bool:
        return ("content", self._topic_index, self._subtopic_index) in self._in_flight

    @property
    def is_loading_quiz(self) -> bool:
        return ("quiz", self._topic_index) in self._in_flight

    @property
    def is_loading_remediation(self) -> bool:
        return self._remediation_version is not None and self._remediation_version == self._version

    @property
    def progress_percent(self) -> float:
        """
        Coarse course progress in percent.

        Counts the current subtopic as done, so the value reaches 100 on
        entering the last subtopic of the last topic.
        """
        if self._phase == Phase.COMPLETE:
            return 100.0
        total_topics = len(self.course.topics)
        subtopics = len(self.current_topic.subtopics)
        percent = (
            self._topic_index * 100.0 / total_topics
            + (self._subtopic_index + 1) * 100.0 / (total_topics * subtopics)
        )
        return min(percent, 100.0)

    @property
    def avatar_mood(self) -> AvatarMood:
        if self._phase == Phase.COMPLETE:
            return AvatarMood.PRAISING
        if self._answer is not None:
            return AvatarMood.PRAISING if self._answer.is_correct else AvatarMood.CONSOLING
        if self.is_loading_content or (self._phase == Phase.TOPIC_QUIZ and self.is_loading_quiz):
            return AvatarMood.LOADING
        if self._phase in (Phase.PRACTICING, Phase.TOPIC_QUIZ):
            return AvatarMood.ASKING
        return AvatarMood.EXPLAINING

    def checkpoint(self) -> Checkpoint:
        """Resumption point for the current cursor."""
        return Checkpoint(
            topic_index=self._topic_index,
            subtopic_index=self._subtopic_index,
            position=self._explanation_index,
        )

    def doubt_context(self) -> list[str]:
        """Text the learner is looking at, for doubt clarification."""
        if self._phase == Phase.COMPLETE:
            return [self.course.title, self.course.description]

        topic = self.current_topic
        subtopic = self.current_subtopic
        context = [self.course.title, topic.name, subtopic.name, subtopic.description]
        if self._phase == Phase.EXPLAINING and self.current_explanation:
            context.append(self.current_explanation)
        elif self.current_question is not None:
            context.append(self.current_question.question)
        elif self.current_mcq is not None:
            context.append(self.current_mcq.question)
        return [c for c in context if c]

    # -------------------------------------------------------------------------
    # Listeners
    # -------------------------------------------------------------------------

    def add_listener(self, callback: Listener) -> Listener:
        self._listeners.append(callback)
        return callback

    def remove_listener(self, callback: Listener):
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _emit(self, event: SessionEvent):
        for callback in list(self._listeners):
            try:
                callback(event, self)
            except Exception:
                logger.exception(f"Session listener failed on {event.value}")

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def advance_explanation(self) -> bool:
        """Next explanation, or on to practice after the last one."""
        if self._closed or self._phase != Phase.EXPLAINING:
            return False

        content = self.current_content
        count = len(content.explanations) if content else 0
        if self._explanation_index < count - 1:
            self._explanation_index += 1
            self._bump()
            self._schedule_checkpoint()
            self._emit(SessionEvent.POSITION_CHANGED)
        else:
            self._set_phase(Phase.PRACTICING)
            self._question_index = 0
            self._answer = None
            self._bump()
            self._emit(SessionEvent.PHASE_CHANGED)
        return True

    def advance_practice(self) -> bool:
        """Next practice question, or on to the topic quiz after the last one."""
        if self._closed or self._phase != Phase.PRACTICING:
            return False

        content = self.current_content
        count = len(content.questions) if content else 0
        if self._question_index < count - 1:
            self._question_index += 1
            self._answer = None
            self._bump()
            self._emit(SessionEvent.POSITION_CHANGED)
        else:
            self._set_phase(Phase.TOPIC_QUIZ)
            self._mcq_index = 0
            self._answer = None
            self._bump()
            self._ensure_quiz()
            self._emit(SessionEvent.PHASE_CHANGED)
        return True

    def advance_quiz(self) -> bool:
        """Next quiz MCQ, or on to the next subtopic after the last one."""
        if self._closed or self._phase != Phase.TOPIC_QUIZ:
            return False

        quiz = self.current_quiz
        count = len(quiz.mcqs) if quiz else 0
        if self._mcq_index < count - 1:
            self._mcq_index += 1
            self._answer = None
            self._bump()
            self._emit(SessionEvent.POSITION_CHANGED)
            return True
        return self.advance_subtopic()

    def advance_subtopic(self) -> bool:
        """Next subtopic of the current topic, or the next topic after the last one."""
        if self._closed or self._phase == Phase.COMPLETE:
            return False

        if self._subtopic_index < len(self.current_topic.subtopics) - 1:
            self._enter(self._topic_index, self._subtopic_index + 1)
            return True
        return self.advance_topic()

    def advance_topic(self) -> bool:
        """First subtopic of the next topic, or complete after the last topic."""
        if self._closed or self._phase == Phase.COMPLETE:
            return False

        if self._topic_index < len(self.course.topics) - 1:
            self._enter(self._topic_index + 1, 0)
            return True

        self._set_phase(Phase.COMPLETE)
        self._answer = None
        self._bump()
        logger.info(f"Course {self.course.id} complete for {self.user_id}")
        self._emit(SessionEvent.PHASE_CHANGED)
        self._emit(SessionEvent.COMPLETED)
        return True

    def go_to(self, topic_index: int, subtopic_index: int):
        """
        Jump to the start of a subtopic (syllabus navigation).

        Raises:
            IndexError: No such topic or subtopic
            RuntimeError: Session is closed
        """
        if self._closed:
            raise RuntimeError("Session is closed")
        self.course.get_subtopic(topic_index, subtopic_index)
        self._enter(topic_index, subtopic_index)

    def _enter(self, topic_index: int, subtopic_index: int):
        self._topic_index = topic_index
        self._subtopic_index = subtopic_index
        self._explanation_index = 0
        self._question_index = 0
        self._mcq_index = 0
        self._answer = None
        phase_changed = self._set_phase(Phase.EXPLAINING)
        self._bump()
        self._ensure_content()
        self._schedule_checkpoint()
        if phase_changed:
            self._emit(SessionEvent.PHASE_CHANGED)
        self._emit(SessionEvent.POSITION_CHANGED)

    def _set_phase(self, phase: Phase) -> bool:
        if phase == self._phase:
            return False
        logger.debug(f"Phase {self._phase.value} -> {phase.value}")
        self._phase = phase
        return True

    def _bump(self):
        self._version += 1
        if self._advance_timer is not None:
            self._advance_timer.cancel()
            self._advance_timer = None

    # -------------------------------------------------------------------------
    # Answers
    # -------------------------------------------------------------------------

    def submit_practice_answer(self, choice: int) -> bool:
        """
        Answer the current practice question.

        Returns:
            False if no practice question is open or it was already answered

        Raises:
            ValueError: Choice is not an option index
        """
        if self._closed or self._phase != Phase.PRACTICING or self._answer is not None:
            return False
        question = self.current_question
        if question is None:
            return False
        return self._record_answer(
            question, choice, self._practice_context(), self.practice_delay, self.advance_practice
        )

    def submit_quiz_answer(self, choice: int) -> bool:
        """
        Answer the current quiz MCQ.

        Returns:
            False if no MCQ is open or it was already answered

        Raises:
            ValueError: Choice is not an option index
        """
        if self._closed or self._phase != Phase.TOPIC_QUIZ or self._answer is not None:
            return False
        mcq = self.current_mcq
        if mcq is None:
            return False
        return self._record_answer(
            mcq, choice, self._quiz_context(), self.quiz_delay, self.advance_quiz
        )

    def _record_answer(
        self,
        question: MCQ,
        choice: int,
        context: list[str],
        delay: float,
        advance: Callable[[], bool],
    ) -> bool:
        # bool is an int subclass but never an option index
        if isinstance(choice, bool) or not isinstance(choice, int):
            raise ValueError(f"Invalid choice: {choice!r}")
        if not 0 <= choice < len(question.options):
            raise ValueError(f"Invalid choice: {choice!r}")

        if question.is_correct(choice):
            self._answer = AnswerRecord(choice=choice, outcome=Outcome.PRAISE)
            event = SessionEvent.PRAISE
        else:
            self._answer = AnswerRecord(
                choice=choice,
                outcome=Outcome.CONSOLE,
                remediation=question.explanation.strip() or None,
            )
            event = SessionEvent.CONSOLE
            if not question.explanation.strip():
                self._request_remediation(question, choice, context)

        self._advance_timer = self.loop.call_later(delay, self._auto_advance, self._version, advance)
        self._emit(event)
        return True

    def _auto_advance(self, version: int, advance: Callable[[], bool]):
        if self._closed or version != self._version:
            logger.debug(f"Dropping stale auto-advance (version {version}, now {self._version})")
            return
        self._advance_timer = None
        advance()

    def _practice_context(self) -> list[str]:
        content = self.current_content
        return [self.current_subtopic.description, *(content.explanations if content else [])]

    def _quiz_context(self) -> list[str]:
        topic = self.current_topic
        context = [topic.name]
        for subtopic in topic.subtopics:
            if subtopic.content is not None:
                context.extend(subtopic.content.explanations)
        return context

    def _request_remediation(self, question: MCQ, choice: int, context: list[str]):
        version = self._version
        self._remediation_version = version
        self.loop.submit(
            self.materializer.explain_wrong_answer,
            question.question,
            question.correct_option,
            question.options[choice],
            context,
            on_success=partial(self._remediation_ready, version),
            on_error=partial(self._remediation_failed, version),
        )

    def _remediation_ready(self, version: int, text: str):
        if self._remediation_version == version:
            self._remediation_version = None
        if self._closed or version != self._version or self._answer is None:
            logger.debug("Dropping stale remediation")
            return
        self._answer.remediation = text
        self._emit(SessionEvent.REMEDIATION_READY)

    def _remediation_failed(self, version: int, error: BaseException):
        if self._remediation_version == version:
            self._remediation_version = None
        logger.warning(f"Remediation failed: {error}")

    # -------------------------------------------------------------------------
    # Materialization
    # -------------------------------------------------------------------------

    def retry(self) -> bool:
        """
        Request missing content for the current position again.

        Returns:
            True if a request was issued
        """
        if self._closed or self._phase == Phase.COMPLETE:
            return False
        requested = self._ensure_content()
        if self._phase == Phase.TOPIC_QUIZ:
            requested = self._ensure_quiz() or requested
        return requested

    def _ensure_content(self) -> bool:
        t, s = self._topic_index, self._subtopic_index
        key = ("content", t, s)
        if self.current_subtopic.content_generated or key in self._in_flight:
            return False

        self._in_flight.add(key)
        logger.info(f"Requesting content for subtopic {t}/{s} of {self.course.id}")
        self.loop.submit(
            self.materializer.materialize_subtopic_content,
            self.course.id,
            t,
            s,
            on_success=partial(self._content_ready, t, s),
            on_error=partial(self._content_failed, t, s),
        )
        return True

    def _ensure_quiz(self) -> bool:
        t = self._topic_index
        key = ("quiz", t)
        if self.current_topic.quiz_generated or key in self._in_flight:
            return False

        self._in_flight.add(key)
        logger.info(f"Requesting quiz for topic {t} of {self.course.id}")
        self.loop.submit(
            self.materializer.materialize_topic_quiz,
            self.course.id,
            t,
            on_success=partial(self._quiz_ready, t),
            on_error=partial(self._quiz_failed, t),
        )
        return True

    def _content_ready(self, topic_index: int, subtopic_index: int, content: SubtopicContent):
        self._in_flight.discard(("content", topic_index, subtopic_index))
        if self._closed:
            logger.debug("Session closed, ignoring content")
            return
        subtopic = self.course.get_subtopic(topic_index, subtopic_index)
        subtopic.content = content
        subtopic.content_generated = True
        if (topic_index, subtopic_index) == (self._topic_index, self._subtopic_index):
            self._clamp_explanation()
        self._emit(SessionEvent.CONTENT_READY)

    def _content_failed(self, topic_index: int, subtopic_index: int, error: BaseException):
        self._in_flight.discard(("content", topic_index, subtopic_index))
        logger.warning(f"Content for subtopic {topic_index}/{subtopic_index} unavailable: {error}")
        if not self._closed:
            self._emit(SessionEvent.CONTENT_FAILED)

    def _quiz_ready(self, topic_index: int, quiz: QuizContent):
        self._in_flight.discard(("quiz", topic_index))
        if self._closed:
            logger.debug("Session closed, ignoring quiz")
            return
        topic = self.course.get_topic(topic_index)
        topic.quiz_content = quiz
        topic.quiz_generated = True
        self._emit(SessionEvent.QUIZ_READY)

    def _quiz_failed(self, topic_index: int, error: BaseException):
        self._in_flight.discard(("quiz", topic_index))
        logger.warning(f"Quiz for topic {topic_index} unavailable: {error}")
        if not self._closed:
            self._emit(SessionEvent.QUIZ_FAILED)

    def _clamp_explanation(self):
        content = self.current_content
        if content is not None and self._explanation_index >= len(content.explanations):
            self._explanation_index = len(content.explanations) - 1

    # -------------------------------------------------------------------------
    # Checkpoints
    # -------------------------------------------------------------------------

    def _schedule_checkpoint(self):
        if self._checkpoint_timer is not None:
            self._checkpoint_timer.cancel()
        self._checkpoint_timer = self.loop.call_later(self.checkpoint_delay, self._write_checkpoint)

    def _write_checkpoint(self):
        self._checkpoint_timer = None
        checkpoint = self.checkpoint()
        logger.debug(f"Writing checkpoint {checkpoint}")
        self.loop.submit(
            self.checkpoints.upsert_checkpoint,
            self.user_id,
            self.course.id,
            checkpoint,
            on_error=self._checkpoint_failed,
        )

    def _checkpoint_failed(self, error: BaseException):
        logger.warning(f"Checkpoint not saved for {self.user_id}/{self.course.id}: {error}")

    # -------------------------------------------------------------------------
    # Exit
    # -------------------------------------------------------------------------

    def close(self):
        """
        Leave the session.

        A checkpoint still waiting for its debounce window is written now.
        Results of requests still in flight are ignored.
        """
        if self._closed:
            return
        self._closed = True
        self._bump()
        if self._checkpoint_timer is not None:
            self._checkpoint_timer.cancel()
            self._write_checkpoint()
        logger.info(f"Closed session on {self.course.id} for {self.user_id}")
