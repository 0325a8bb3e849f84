"""
Shared fixtures for MentorVerse tests.

No test talks to the network: generation is replaced by fakes, and the
session loop runs on a fake clock with executors that either run work
immediately or hold it until the test releases it.
"""

import sqlite3
from concurrent.futures import Executor, Future

import pytest

from mentorverse.classroom import ContentStore, LearningSession, SessionLoop
from mentorverse.generation import GenerationError
from mentorverse.schemas import MCQ, Course, QuizContent, Subtopic, SubtopicContent, Topic


# -----------------------------------------------------------------------------
# Builders
# -----------------------------------------------------------------------------

def make_mcq(text: str = "What is 2 + 2?", correct: int = 1, explanation: str = "") -> MCQ:
    return MCQ(
        question=text,
        options=["3", "4", "5", "22"],
        correct=correct,
        explanation=explanation,
    )


def make_content(explanations: int = 3, questions: int = 2, explanation: str = "") -> SubtopicContent:
    return SubtopicContent(
        explanations=[f"Explanation {i + 1}" for i in range(explanations)],
        questions=[make_mcq(f"Practice {i + 1}", explanation=explanation) for i in range(questions)],
        examples=["An example"],
        key_takeaways=["A takeaway"],
    )


def make_quiz(mcqs: int = 2, explanation: str = "") -> QuizContent:
    return QuizContent(mcqs=[make_mcq(f"Quiz {i + 1}", explanation=explanation) for i in range(mcqs)])


def make_course(
    shape: tuple = (1,),
    materialized: bool = True,
    quizzes: bool = False,
    course_id: str = "course-1",
    explanations: int = 3,
    questions: int = 2,
) -> Course:
    """
    Build a course with len(shape) topics, shape[i] subtopics in topic i.

    materialized: subtopic content present
    quizzes: topic quizzes present
    """
    topics = []
    for t, count in enumerate(shape):
        subtopics = []
        for s in range(count):
            subtopics.append(Subtopic(
                name=f"Subtopic {t + 1}.{s + 1}",
                description=f"About subtopic {t + 1}.{s + 1}",
                content=make_content(explanations, questions) if materialized else None,
                content_generated=materialized,
            ))
        topics.append(Topic(
            name=f"Topic {t + 1}",
            description=f"About topic {t + 1}",
            subtopics=subtopics,
            quiz_content=make_quiz() if quizzes else None,
            quiz_generated=quizzes,
        ))
    return Course(id=course_id, title="Arithmetic", description="Numbers", topics=topics, created_by="alice")


# -----------------------------------------------------------------------------
# Loop plumbing
# -----------------------------------------------------------------------------

class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class InlineExecutor(Executor):
    """Runs submitted work immediately on the calling thread."""

    def __init__(self):
        self.submitted = 0

    def submit(self, fn, *args, **kwargs):
        self.submitted += 1
        future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        return future


class DeferredExecutor(Executor):
    """Holds submitted work until run_all() is called."""

    def __init__(self):
        self.pending = []

    def submit(self, fn, *args, **kwargs):
        future = Future()
        self.pending.append((future, fn, args, kwargs))
        return future

    def run_all(self):
        pending, self.pending = self.pending, []
        for future, fn, args, kwargs in pending:
            try:
                future.set_result(fn(*args, **kwargs))
            except Exception as e:
                future.set_exception(e)


# -----------------------------------------------------------------------------
# Collaborator fakes
# -----------------------------------------------------------------------------

class FakeMaterializer:
    """Records calls; returns canned content or fails on request."""

    def __init__(self):
        self.content_calls = []
        self.quiz_calls = []
        self.remediation_calls = []
        self.fail_content = set()  # (topic_index, subtopic_index)
        self.fail_quiz = set()  # topic_index
        self.fail_remediation = False
        self.remediation_text = "Four is two plus two."

    def materialize_subtopic_content(self, course_id, topic_index, subtopic_index):
        self.content_calls.append((topic_index, subtopic_index))
        if (topic_index, subtopic_index) in self.fail_content:
            raise GenerationError("service unavailable")
        return make_content()

    def materialize_topic_quiz(self, course_id, topic_index):
        self.quiz_calls.append(topic_index)
        if topic_index in self.fail_quiz:
            raise GenerationError("malformed quiz")
        return make_quiz()

    def explain_wrong_answer(self, question, correct_text, chosen_text, context):
        self.remediation_calls.append((question, correct_text, chosen_text, list(context)))
        if self.fail_remediation:
            raise GenerationError("timeout")
        return self.remediation_text


class RecordingCheckpointStore:
    def __init__(self):
        self.writes = []
        self.fail = False

    def upsert_checkpoint(self, user_id, course_id, checkpoint):
        if self.fail:
            raise sqlite3.OperationalError("database is locked")
        self.writes.append((user_id, course_id, checkpoint))


# -----------------------------------------------------------------------------
# Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def executor():
    return InlineExecutor()


@pytest.fixture
def loop(executor, clock):
    return SessionLoop(executor=executor, clock=clock)


@pytest.fixture
def materializer():
    return FakeMaterializer()


@pytest.fixture
def checkpoints():
    return RecordingCheckpointStore()


@pytest.fixture
def make_session(materializer, checkpoints, loop):
    def factory(course=None, **kwargs):
        return LearningSession(
            course or make_course(),
            materializer,
            checkpoints,
            "alice",
            loop,
            **kwargs,
        )
    return factory


@pytest.fixture
def store(tmp_path):
    return ContentStore(tmp_path / "mentorverse.db")
