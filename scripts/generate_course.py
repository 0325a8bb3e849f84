#!/usr/bin/env python3
"""
generate_course.py - Generate a course outline and optionally all of its content.

Creates a course for a user from a subject description. By default only
the outline is stored and content is generated while the learner studies.
With --materialize every subtopic's content and every topic quiz is
generated up front.

Usage:
  python scripts/generate_course.py --topic "Linear algebra"
  python scripts/generate_course.py --topic "Spanish for travel" --level intermediate \\
      --situation "Trip to Madrid next month"
  python scripts/generate_course.py --topic "Python basics" --materialize
"""

import argparse
import logging
import sys
from pathlib import Path

# Project root for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from mentorverse.classroom import ContentMaterializer, ContentStore
from mentorverse.config import LOG_FORMAT, Settings
from mentorverse.generation import GeminiClient, GenerationError, GenerationService
from mentorverse.schemas import LEVELS

# Setup logging
logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
logger = logging.getLogger(__name__)


def materialize_all(materializer: ContentMaterializer, course_id: str) -> tuple[int, int]:
    """
    Generate everything that is still missing in a course.

    Returns:
        (generated, failed) counts
    """
    course = materializer.store.read_course(course_id)
    generated = 0
    failed = 0

    for t, topic in enumerate(course.topics):
        for s, subtopic in enumerate(topic.subtopics):
            if subtopic.content_generated:
                continue
            logger.info(f"  [{t + 1}.{s + 1}] {subtopic.name}")
            try:
                materializer.materialize_subtopic_content(course_id, t, s)
                generated += 1
            except GenerationError as e:
                logger.error(f"  ✗ Content failed for {subtopic.name}: {e}")
                failed += 1

        if not topic.quiz_generated:
            logger.info(f"  [{t + 1}] Quiz: {topic.name}")
            try:
                materializer.materialize_topic_quiz(course_id, t)
                generated += 1
            except GenerationError as e:
                logger.error(f"  ✗ Quiz failed for {topic.name}: {e}")
                failed += 1

    return generated, failed


def main():
    settings = Settings.from_env()

    parser = argparse.ArgumentParser(
        description="Generate a course using LLM",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument(
        "--topic",
        type=str,
        required=True,
        help="What the course should teach"
    )
    parser.add_argument(
        "--situation",
        type=str,
        help="Learner's situation or goal, used to tailor the course"
    )
    parser.add_argument(
        "--level",
        choices=LEVELS,
        default="beginner",
        help="Difficulty level (default: beginner)"
    )
    parser.add_argument(
        "--user",
        type=str,
        default=settings.user_id,
        help=f"Owner of the course (default: {settings.user_id})"
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=settings.db_path,
        help=f"Path to database (default: {settings.db_path})"
    )
    parser.add_argument(
        "--model",
        type=str,
        default=settings.model,
        help=f"Gemini model to use (default: {settings.model})"
    )
    parser.add_argument(
        "--materialize",
        action="store_true",
        help="Generate all subtopic content and topic quizzes now"
    )

    args = parser.parse_args()

    try:
        settings.validate()
    except ValueError as e:
        logger.error(str(e))
        sys.exit(1)

    store = ContentStore(args.db)
    client = GeminiClient(
        api_key=settings.gemini_api_key,
        model=args.model,
        sleep_seconds=settings.api_sleep,
    )
    materializer = ContentMaterializer(store, GenerationService(client))

    logger.info(f"Generating course for {args.topic!r} ({args.level})...")
    try:
        course, is_existing = materializer.generate_course(args.user, args.topic, args.situation, args.level)
    except GenerationError as e:
        logger.error(f"✗ Course generation failed: {e}")
        sys.exit(1)

    if is_existing:
        logger.info(f"Course already exists: {course.title} ({course.id})")
    else:
        logger.info(f"✓ Created: {course.title} ({course.id})")

    for t, topic in enumerate(course.topics, 1):
        logger.info(f"  {t}. {topic.name} ({len(topic.subtopics)} subtopics)")

    if args.materialize:
        logger.info("Materializing content...")
        generated, failed = materialize_all(materializer, course.id)
        logger.info(f"Done: {generated} generated, {failed} failed")
        if failed:
            sys.exit(1)


if __name__ == "__main__":
    main()
