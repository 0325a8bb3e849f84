"""
Session renderer - HTML fragments for the learning session.

Provides:
- Progress bar and avatar line
- Explanation cards
- Practice question and quiz MCQ display with answer feedback
- Syllabus with status indicators
- Completion view
"""

import html
from typing import Optional

from mentorverse.classroom.session import AnswerRecord
from mentorverse.schemas import MCQ, AvatarMood, Course, SubtopicContent


AVATAR_LINES = {
    AvatarMood.LOADING: "Give me a moment, I'm preparing your material...",
    AvatarMood.EXPLAINING: "Let's go through this together.",
    AvatarMood.ASKING: "Your turn! Pick the answer you think is right.",
    AvatarMood.PRAISING: "Great job, that's exactly right!",
    AvatarMood.CONSOLING: "Not quite, but that's how we learn. Let's look at why.",
}

SYLLABUS_MARKS = {
    "done": "✓",
    "current": "→",
    "pending": "○",
}


def get_session_css() -> str:
    """Get CSS styles for the session view."""
    return """
    <style>
    .mv-avatar {
        display: flex;
        align-items: center;
        gap: 0.6em;
        background: #f3e5f5;
        border-radius: 12px;
        padding: 0.8em 1.2em;
        margin: 1em 0;
        color: #4a148c;
    }
    .mv-avatar-mood {
        font-size: 0.8em;
        text-transform: uppercase;
        letter-spacing: 0.05em;
        color: #7b1fa2;
    }
    .mv-progress {
        background: #eee;
        border-radius: 6px;
        height: 10px;
        overflow: hidden;
    }
    .mv-progress-fill {
        background: #7b1fa2;
        height: 100%;
    }
    .mv-progress-label {
        font-size: 0.85em;
        color: #666;
        margin-top: 0.3em;
    }
    .mv-card {
        background: white;
        border: 1px solid #e0e0e0;
        border-radius: 12px;
        padding: 1.5em;
        margin: 1em 0;
        line-height: 1.7;
    }
    .mv-card-title {
        font-weight: 600;
        color: #4a148c;
        margin-bottom: 0.6em;
    }
    .mv-counter {
        float: right;
        font-size: 0.85em;
        color: #999;
    }
    .mv-option {
        border: 1px solid #ddd;
        border-radius: 8px;
        padding: 0.6em 1em;
        margin: 0.4em 0;
    }
    .mv-option-correct {
        border-color: #388E3C;
        background: #e8f5e9;
    }
    .mv-option-wrong {
        border-color: #d32f2f;
        background: #ffebee;
    }
    .mv-feedback {
        border-radius: 8px;
        padding: 0.8em 1em;
        margin-top: 1em;
    }
    .mv-feedback-praise {
        background: #e8f5e9;
        color: #1b5e20;
    }
    .mv-feedback-console {
        background: #fff3e0;
        color: #e65100;
    }
    .mv-syllabus-topic {
        font-weight: 600;
        margin-top: 0.6em;
    }
    .mv-syllabus-item {
        padding-left: 1em;
        color: #555;
    }
    .mv-syllabus-current {
        color: #4a148c;
        font-weight: 600;
    }
    .mv-complete {
        text-align: center;
        background: #e8f5e9;
        border-radius: 12px;
        padding: 2em;
    }
    </style>
    """


def render_progress(percent: float) -> str:
    """Render the course progress bar."""
    percent = max(0.0, min(percent, 100.0))
    return (
        '<div class="mv-progress">'
        f'<div class="mv-progress-fill" style="width: {percent:.0f}%"></div>'
        '</div>'
        f'<div class="mv-progress-label">{percent:.0f}% complete</div>'
    )


def render_avatar_message(mood: AvatarMood, name: str = "Mentor") -> str:
    """Render the companion's line for its current mood."""
    return (
        '<div class="mv-avatar">'
        f'<span class="mv-avatar-mood">{html.escape(name)} · {mood.value}</span>'
        f'<span>{html.escape(AVATAR_LINES[mood])}</span>'
        '</div>'
    )


def render_explanation(text: str, index: int, total: int, title: str = "") -> str:
    """Render one explanation card."""
    parts = ['<div class="mv-card">']
    parts.append(f'<span class="mv-counter">{index + 1} / {total}</span>')
    if title:
        parts.append(f'<div class="mv-card-title">{html.escape(title)}</div>')
    parts.append(f'<div>{html.escape(text)}</div>')
    parts.append('</div>')
    return ''.join(parts)


def render_question(
    question: MCQ,
    index: int,
    total: int,
    label: str = "Practice",
    answer: Optional[AnswerRecord] = None,
) -> str:
    """
    Render a practice question or quiz MCQ.

    Once answered, the correct option and a wrong choice are highlighted
    and feedback is shown below the options.
    """
    parts = ['<div class="mv-card">']
    parts.append(f'<span class="mv-counter">{index + 1} / {total}</span>')
    parts.append(f'<div class="mv-card-title">{html.escape(label)}</div>')
    parts.append(f'<div>{html.escape(question.question)}</div>')

    for i, option in enumerate(question.options):
        css = "mv-option"
        if answer is not None:
            if i == question.correct:
                css += " mv-option-correct"
            elif i == answer.choice:
                css += " mv-option-wrong"
        parts.append(f'<div class="{css}">{chr(ord("A") + i)}. {html.escape(option)}</div>')

    if answer is not None:
        parts.append(render_feedback(answer, question))

    parts.append('</div>')
    return ''.join(parts)


def render_feedback(answer: AnswerRecord, question: MCQ, loading: bool = False) -> str:
    """Render praise, or consolation with the remediation text when there is one."""
    if answer.is_correct:
        return '<div class="mv-feedback mv-feedback-praise">Correct!</div>'

    parts = ['<div class="mv-feedback mv-feedback-console">']
    parts.append(f'<div>The right answer is: {html.escape(question.correct_option)}</div>')
    if answer.remediation:
        parts.append(f'<div>{html.escape(answer.remediation)}</div>')
    elif loading:
        parts.append('<div><em>Preparing an explanation...</em></div>')
    parts.append('</div>')
    return ''.join(parts)


def render_key_takeaways(content: SubtopicContent) -> str:
    """Render examples and key takeaways, if the content has any."""
    if not content.examples and not content.key_takeaways:
        return ""
    parts = ['<div class="mv-card">']
    if content.examples:
        parts.append('<div class="mv-card-title">Examples</div><ul>')
        parts.extend(f'<li>{html.escape(e)}</li>' for e in content.examples)
        parts.append('</ul>')
    if content.key_takeaways:
        parts.append('<div class="mv-card-title">Key takeaways</div><ul>')
        parts.extend(f'<li>{html.escape(k)}</li>' for k in content.key_takeaways)
        parts.append('</ul>')
    parts.append('</div>')
    return ''.join(parts)


def syllabus_status(
    topic_index: int,
    subtopic_index: int,
    current_topic: int,
    current_subtopic: int,
    complete: bool = False,
) -> str:
    """Status of a subtopic relative to the learner's position: done, current or pending."""
    if complete or (topic_index, subtopic_index) < (current_topic, current_subtopic):
        return "done"
    if (topic_index, subtopic_index) == (current_topic, current_subtopic):
        return "current"
    return "pending"


def render_syllabus(
    course: Course,
    current_topic: int,
    current_subtopic: int,
    complete: bool = False,
) -> str:
    """Render the course syllabus with ✓ / → / ○ indicators."""
    parts = []
    for t, topic in enumerate(course.topics):
        parts.append(f'<div class="mv-syllabus-topic">{t + 1}. {html.escape(topic.name)}</div>')
        for s, subtopic in enumerate(topic.subtopics):
            status = syllabus_status(t, s, current_topic, current_subtopic, complete)
            css = "mv-syllabus-item"
            if status == "current":
                css += " mv-syllabus-current"
            parts.append(
                f'<div class="{css}">{SYLLABUS_MARKS[status]} {html.escape(subtopic.name)}</div>'
            )
    return ''.join(parts)


def render_completion(course: Course) -> str:
    """Render the course completion view."""
    return f"""
    <div class="mv-complete">
        <h2>Course complete!</h2>
        <div>You finished <strong>{html.escape(course.title)}</strong>:
        {len(course.topics)} topics, {sum(len(t.subtopics) for t in course.topics)} subtopics.</div>
    </div>
    """
