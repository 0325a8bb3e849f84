"""
MentorVerse - Personalized AI Course Platform

Streamlit application that generates courses on demand and walks the
learner through explanations, practice questions and topic quizzes.

Usage:
    streamlit run app.py
"""

import logging
import time

import streamlit as st

from mentorverse.classroom import (
    ContentMaterializer,
    ContentStore,
    LearningSession,
    SessionLoop,
)
from mentorverse.config import LOG_FORMAT, Settings
from mentorverse.generation import GeminiClient, GenerationError, GenerationService
from mentorverse.schemas import LEVELS, Phase
from mentorverse.viewer import (
    get_session_css,
    render_avatar_message,
    render_completion,
    render_explanation,
    render_feedback,
    render_key_takeaways,
    render_progress,
    render_question,
    render_syllabus,
)


# -----------------------------------------------------------------------------
# Configuration
# -----------------------------------------------------------------------------

POLL_INTERVAL = 0.5  # seconds between reruns while timers or requests are pending

st.set_page_config(
    page_title="MentorVerse",
    page_icon="🎓",
    layout="wide",
    initial_sidebar_state="expanded",
)

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Session State Initialization
# -----------------------------------------------------------------------------

def init_session_state():
    """Initialize session state variables."""
    if "settings" not in st.session_state:
        settings = Settings.from_env()
        logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO), format=LOG_FORMAT)
        st.session_state.settings = settings

    settings = st.session_state.settings

    if "store" not in st.session_state:
        st.session_state.store = ContentStore(settings.db_path)

    if "materializer" not in st.session_state:
        if settings.gemini_api_key:
            client = GeminiClient(
                api_key=settings.gemini_api_key,
                model=settings.model,
                sleep_seconds=settings.api_sleep,
            )
            st.session_state.materializer = ContentMaterializer(
                st.session_state.store, GenerationService(client)
            )
        else:
            st.session_state.materializer = None

    if "loop" not in st.session_state:
        st.session_state.loop = SessionLoop()

    if "learning" not in st.session_state:
        st.session_state.learning = None

    if "doubt_answer" not in st.session_state:
        st.session_state.doubt_answer = None


# -----------------------------------------------------------------------------
# Sidebar: Courses
# -----------------------------------------------------------------------------

def render_sidebar():
    """Render the sidebar with course list and new course form."""
    st.sidebar.title("🎓 MentorVerse")

    if not st.session_state.materializer:
        st.sidebar.error("GEMINI_API_KEY not set. Add it to your .env file to generate courses.")

    settings = st.session_state.settings
    store = st.session_state.store

    with st.sidebar.form("new_course"):
        st.subheader("New course")
        topic = st.text_input("What do you want to learn?", placeholder="e.g., Linear algebra")
        situation = st.text_area("Your situation (optional)", placeholder="e.g., Exam in two weeks")
        level = st.selectbox("Level", LEVELS)
        submitted = st.form_submit_button(
            "Generate course",
            type="primary",
            disabled=st.session_state.materializer is None,
        )
    if submitted:
        create_course(topic, situation, level)

    st.sidebar.divider()
    st.sidebar.subheader("Your courses")

    courses = store.list_courses(settings.user_id)
    if not courses:
        st.sidebar.info("No courses yet.")
    for course in courses:
        if st.sidebar.button(course.title, key=f"course_{course.id}", use_container_width=True):
            open_course(course.id)

    session = st.session_state.learning
    if session:
        st.sidebar.divider()
        st.sidebar.subheader("Syllabus")
        st.sidebar.markdown(
            render_syllabus(session.course, session.topic_index, session.subtopic_index, session.is_complete),
            unsafe_allow_html=True,
        )


def create_course(topic: str, situation: str, level: str):
    """Generate a course and open it."""
    materializer = st.session_state.materializer
    try:
        with st.spinner("Designing your course..."):
            course, is_existing = materializer.generate_course(
                st.session_state.settings.user_id, topic, situation or None, level
            )
    except ValueError as e:
        st.sidebar.error(str(e))
        return
    except GenerationError as e:
        logger.error(f"Course generation failed: {e}")
        st.sidebar.error("Course generation failed. Please try again.")
        return

    if is_existing:
        st.sidebar.info(f"You already have “{course.title}”, opening it.")
    open_course(course.id)


def open_course(course_id: str):
    """Start a learning session, resuming from the stored checkpoint."""
    settings = st.session_state.settings
    store = st.session_state.store

    if st.session_state.materializer is None:
        st.error("GEMINI_API_KEY not set. Courses cannot be studied without it.")
        return

    close_session()
    course = store.read_course(course_id)
    if course is None:
        st.error(f"Course not found: {course_id}")
        return

    progress = store.get_progress(settings.user_id, course_id)
    st.session_state.learning = LearningSession(
        course,
        st.session_state.materializer,
        store,
        settings.user_id,
        st.session_state.loop,
        practice_delay=settings.practice_delay,
        quiz_delay=settings.quiz_delay,
        checkpoint_delay=settings.checkpoint_delay,
        start=progress.checkpoint if progress else None,
    )
    st.session_state.doubt_answer = None
    st.rerun()


def close_session():
    """Leave the current session, if any."""
    session = st.session_state.learning
    if session:
        session.close()
        st.session_state.loop.run_pending()
    st.session_state.learning = None


# -----------------------------------------------------------------------------
# Main Content: Learning View
# -----------------------------------------------------------------------------

def render_learning_view():
    """Render the current session state."""
    session = st.session_state.learning
    if not session:
        st.title("Welcome to MentorVerse")
        st.info("Generate a course or pick one from the sidebar to begin.")
        return

    st.markdown(get_session_css(), unsafe_allow_html=True)
    st.title(session.course.title)
    st.markdown(render_progress(session.progress_percent), unsafe_allow_html=True)
    st.markdown(render_avatar_message(session.avatar_mood), unsafe_allow_html=True)

    if session.is_complete:
        st.markdown(render_completion(session.course), unsafe_allow_html=True)
        st.balloons()
        if st.button("Back to my courses"):
            close_session()
            st.rerun()
        return

    topic = session.current_topic
    subtopic = session.current_subtopic
    st.subheader(f"{topic.name} · {subtopic.name}")

    if session.phase == Phase.EXPLAINING:
        render_explaining(session)
    elif session.phase == Phase.PRACTICING:
        render_practicing(session)
    elif session.phase == Phase.TOPIC_QUIZ:
        render_quiz(session)

    render_doubt_panel(session)


def render_missing(session: LearningSession, loading: bool, what: str):
    """Loading indicator, or a retry button when the request failed."""
    if loading:
        st.info(f"Preparing {what}...")
    else:
        st.warning(f"{what.capitalize()} not available yet.")
        if st.button("Retry"):
            session.retry()
            st.rerun()


def render_explaining(session: LearningSession):
    content = session.current_content
    if content is None:
        render_missing(session, session.is_loading_content, "this lesson")
        return

    st.markdown(
        render_explanation(
            session.current_explanation or "",
            session.explanation_index,
            len(content.explanations),
            session.current_subtopic.name,
        ),
        unsafe_allow_html=True,
    )
    last = session.explanation_index >= len(content.explanations) - 1
    if last:
        st.markdown(render_key_takeaways(content), unsafe_allow_html=True)
    if st.button("Start practice →" if last else "Next →", type="primary"):
        session.advance_explanation()
        st.rerun()


def render_practicing(session: LearningSession):
    question = session.current_question
    if question is None:
        render_missing(session, session.is_loading_content, "practice questions")
        return

    total = len(session.current_content.questions)
    render_answerable(
        session,
        question,
        session.question_index,
        total,
        "Practice",
        session.submit_practice_answer,
        session.advance_practice,
    )


def render_quiz(session: LearningSession):
    mcq = session.current_mcq
    if mcq is None:
        render_missing(session, session.is_loading_quiz, "the topic quiz")
        if not session.is_loading_quiz and st.button("Skip quiz"):
            session.advance_quiz()
            st.rerun()
        return

    total = len(session.current_quiz.mcqs)
    render_answerable(
        session,
        mcq,
        session.mcq_index,
        total,
        f"Quiz: {session.current_topic.name}",
        session.submit_quiz_answer,
        session.advance_quiz,
    )


def render_answerable(session, question, index, total, label, submit, advance):
    """Render a question with one button per option; options lock once answered."""
    answer = session.answer
    st.markdown(render_question(question, index, total, label), unsafe_allow_html=True)

    key = f"{session.version}_{label}_{index}"
    for i, option in enumerate(question.options):
        if st.button(
            f"{chr(ord('A') + i)}. {option}",
            key=f"opt_{key}_{i}",
            disabled=answer is not None,
            use_container_width=True,
        ):
            submit(i)
            st.rerun()

    if answer is not None:
        st.markdown(
            render_feedback(answer, question, loading=session.is_loading_remediation),
            unsafe_allow_html=True,
        )
        if st.button("Continue →", key=f"next_{key}"):
            advance()
            st.rerun()


def render_doubt_panel(session: LearningSession):
    """Ask a free-form question about the current material."""
    materializer = st.session_state.materializer
    if materializer is None:
        return

    with st.expander("Have a doubt?"):
        doubt = st.text_input("Ask about what you're studying", key="doubt_input")
        if st.button("Ask", key="doubt_ask"):
            try:
                with st.spinner("Thinking..."):
                    st.session_state.doubt_answer = materializer.clarify_doubt(
                        session.doubt_context(), doubt
                    )
            except ValueError as e:
                st.warning(str(e))
            except GenerationError as e:
                logger.error(f"Doubt clarification failed: {e}")
                st.error("Could not answer right now. Please try again.")
        if st.session_state.doubt_answer:
            st.markdown(st.session_state.doubt_answer)


# -----------------------------------------------------------------------------
# Main App
# -----------------------------------------------------------------------------

def main():
    """Main application entry point."""
    init_session_state()
    loop = st.session_state.loop
    loop.run_pending()

    render_sidebar()
    render_learning_view()

    if loop.has_pending():
        deadline = loop.next_deadline()
        time.sleep(min(POLL_INTERVAL, deadline) if deadline is not None else POLL_INTERVAL)
        st.rerun()


if __name__ == "__main__":
    main()
