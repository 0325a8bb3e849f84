"""
ContentStore - Courses and learner progress in a SQLite database.

Stores:
- Courses as JSON documents (topics -> subtopics, mutated in place as
  content and quizzes are materialized)
- One progress checkpoint per (user, course) pair
"""

import json
import sqlite3
import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional

from mentorverse.config import DEFAULT_DB_PATH
from mentorverse.schemas import Checkpoint, Course, CourseProgress, QuizContent, SubtopicContent


class CourseNotFoundError(LookupError):
    """No course with the requested id."""


class ContentStore:
    """
    Course and progress storage in SQLite.

    Each method opens its own connection, so a store can be shared with
    background worker threads. Nested document updates run inside
    BEGIN IMMEDIATE transactions so concurrent materializations of the
    same course cannot overwrite each other.
    """

    def __init__(self, db_path: Optional[Path] = None):
        """
        Initialize the store.

        Args:
            db_path: Path to the database file (default: ~/.mentorverse/mentorverse.db)
        """
        self.db_path = Path(db_path) if db_path else DEFAULT_DB_PATH
        self._ensure_database()

    def _ensure_database(self):
        """Create database and tables if they don't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(str(self.db_path))
        try:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS courses (
                    id TEXT PRIMARY KEY,
                    created_by TEXT NOT NULL,
                    title TEXT NOT NULL,
                    document TEXT NOT NULL,
                    created_at TEXT NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_courses_created_by
                ON courses(created_by);

                CREATE TABLE IF NOT EXISTS progress (
                    user_id TEXT NOT NULL,
                    course_id TEXT NOT NULL,
                    topic_index INTEGER NOT NULL DEFAULT 0,
                    subtopic_index INTEGER NOT NULL DEFAULT 0,
                    position INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    PRIMARY KEY (user_id, course_id)
                );
            """)
            conn.commit()
        finally:
            conn.close()

    def _get_connection(self) -> sqlite3.Connection:
        """Get a new database connection."""
        conn = sqlite3.connect(str(self.db_path), timeout=10.0)
        conn.row_factory = sqlite3.Row
        return conn

    # -------------------------------------------------------------------------
    # Courses
    # -------------------------------------------------------------------------

    def create_course(self, course: Course) -> Course:
        """Store a new course and return it with its assigned id."""
        stored = course.model_copy(update={
            "id": uuid.uuid4().hex,
            "created_at": course.created_at or datetime.now(),
        })
        conn = self._get_connection()
        try:
            conn.execute(
                """INSERT INTO courses (id, created_by, title, document, created_at)
                   VALUES (?, ?, ?, ?, ?)""",
                (
                    stored.id,
                    stored.created_by,
                    stored.title,
                    stored.model_dump_json(),
                    stored.created_at.isoformat(),
                )
            )
            conn.commit()
        finally:
            conn.close()
        return stored

    def read_course(self, course_id: str) -> Optional[Course]:
        """Get a course by ID, or None if it does not exist."""
        conn = self._get_connection()
        try:
            return self._read_course(conn, course_id)
        finally:
            conn.close()

    def list_courses(self, user_id: str) -> list[Course]:
        """Get all courses created by a user, newest first."""
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                """SELECT document FROM courses
                   WHERE created_by = ?
                   ORDER BY created_at DESC""",
                (user_id,)
            )
            return [Course.model_validate(json.loads(row["document"])) for row in cursor.fetchall()]
        finally:
            conn.close()

    def find_course_by_title(self, user_id: str, title: str) -> Optional[Course]:
        """Find a user's course with the same title (case-insensitive)."""
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                """SELECT document FROM courses
                   WHERE created_by = ? AND lower(title) = lower(?)
                   ORDER BY created_at
                   LIMIT 1""",
                (user_id, title.strip())
            )
            row = cursor.fetchone()
            return Course.model_validate(json.loads(row["document"])) if row else None
        finally:
            conn.close()

    def save_subtopic_content(
        self,
        course_id: str,
        topic_index: int,
        subtopic_index: int,
        content: SubtopicContent,
    ) -> Course:
        """
        Attach generated content to a subtopic and mark it generated.

        The first stored content wins; a later save leaves it in place.
        """
        def apply(course: Course):
            subtopic = course.get_subtopic(topic_index, subtopic_index)
            if subtopic.content_generated:
                return
            subtopic.content = content
            subtopic.content_generated = True

        return self._update_course(course_id, apply)

    def save_topic_quiz(self, course_id: str, topic_index: int, quiz: QuizContent) -> Course:
        """Attach a generated quiz to a topic and mark it generated, unless one is stored."""
        def apply(course: Course):
            topic = course.get_topic(topic_index)
            if topic.quiz_generated:
                return
            topic.quiz_content = quiz
            topic.quiz_generated = True

        return self._update_course(course_id, apply)

    def _read_course(self, conn: sqlite3.Connection, course_id: str) -> Optional[Course]:
        cursor = conn.execute(
            "SELECT document FROM courses WHERE id = ?", (course_id,)
        )
        row = cursor.fetchone()
        if not row:
            return None
        return Course.model_validate(json.loads(row["document"]))

    def _update_course(self, course_id: str, apply) -> Course:
        """Read-modify-write a course document inside one write transaction."""
        conn = self._get_connection()
        try:
            conn.execute("BEGIN IMMEDIATE")
            course = self._read_course(conn, course_id)
            if course is None:
                raise CourseNotFoundError(f"Course not found: {course_id}")
            apply(course)
            conn.execute(
                "UPDATE courses SET document = ? WHERE id = ?",
                (course.model_dump_json(), course_id)
            )
            conn.commit()
            return course
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    # -------------------------------------------------------------------------
    # Progress
    # -------------------------------------------------------------------------

    def upsert_checkpoint(self, user_id: str, course_id: str, checkpoint: Checkpoint) -> CourseProgress:
        """Create or replace the checkpoint for a (user, course) pair."""
        conn = self._get_connection()
        try:
            now = datetime.now().isoformat()
            conn.execute(
                """INSERT INTO progress
                     (user_id, course_id, topic_index, subtopic_index, position, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?)
                   ON CONFLICT(user_id, course_id) DO UPDATE SET
                     topic_index = excluded.topic_index,
                     subtopic_index = excluded.subtopic_index,
                     position = excluded.position,
                     updated_at = excluded.updated_at""",
                (
                    user_id,
                    course_id,
                    checkpoint.topic_index,
                    checkpoint.subtopic_index,
                    checkpoint.position,
                    now,
                    now,
                )
            )
            conn.commit()
        finally:
            conn.close()
        return self.get_progress(user_id, course_id)

    def get_progress(self, user_id: str, course_id: str) -> Optional[CourseProgress]:
        """Get the stored progress for a (user, course) pair."""
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                """SELECT user_id, course_id, topic_index, subtopic_index, position,
                          created_at, updated_at
                   FROM progress
                   WHERE user_id = ? AND course_id = ?""",
                (user_id, course_id)
            )
            row = cursor.fetchone()
            if not row:
                return None
            return CourseProgress(
                user_id=row["user_id"],
                course_id=row["course_id"],
                checkpoint=Checkpoint(
                    topic_index=row["topic_index"],
                    subtopic_index=row["subtopic_index"],
                    position=row["position"],
                ),
                created_at=datetime.fromisoformat(row["created_at"]),
                updated_at=datetime.fromisoformat(row["updated_at"]),
            )
        finally:
            conn.close()
