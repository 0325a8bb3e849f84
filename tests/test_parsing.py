"""
LLM response parsing tests.
"""

import json

import pytest

from mentorverse.generation import GenerationError, extract_json_from_response, parse_model
from mentorverse.schemas import CourseOutline, QuizContent, SubtopicContent


def content_payload(**overrides) -> dict:
    payload = {
        "explanations": ["Addition combines numbers."],
        "questions": [
            {"question": "2 + 2?", "options": ["3", "4", "5", "6"], "correct": 1, "explanation": ""},
        ],
        "examples": ["1 + 1 = 2"],
        "keyTakeaways": ["Order does not matter"],
    }
    payload.update(overrides)
    return payload


class TestExtractJson:
    def test_plain_object(self):
        assert extract_json_from_response('{"a": 1}') == {"a": 1}

    def test_code_block(self):
        text = 'Here you go:\n```json\n{"a": [1, 2]}\n```\nEnjoy!'
        assert extract_json_from_response(text) == {"a": [1, 2]}

    def test_untagged_code_block(self):
        assert extract_json_from_response('```\n{"a": 1}\n```') == {"a": 1}

    def test_object_inside_prose(self):
        text = 'Sure! {"a": {"b": 2}} Let me know if you need more.'
        assert extract_json_from_response(text) == {"a": {"b": 2}}

    def test_braces_inside_strings(self):
        text = 'Result: {"a": "curly } brace", "b": "quote \\" {"}'
        assert extract_json_from_response(text) == {"a": "curly } brace", "b": 'quote " {'}

    def test_empty_response(self):
        with pytest.raises(GenerationError):
            extract_json_from_response("   ")

    def test_no_json(self):
        with pytest.raises(GenerationError):
            extract_json_from_response("I cannot help with that.")

    def test_array_is_rejected(self):
        with pytest.raises(GenerationError):
            extract_json_from_response('["a", "b"]')

    def test_truncated_object(self):
        with pytest.raises(GenerationError):
            extract_json_from_response('{"a": [1, 2')


class TestParseModel:
    def test_subtopic_content(self):
        content = parse_model(json.dumps(content_payload()), SubtopicContent)
        assert content.key_takeaways == ["Order does not matter"]
        assert content.questions[0].correct_option == "4"

    def test_explanation_objects_are_rejected(self):
        payload = content_payload(explanations=[{"title": "Addition", "text": "Combines numbers"}])
        with pytest.raises(GenerationError):
            parse_model(json.dumps(payload), SubtopicContent)

    def test_empty_explanations_are_rejected(self):
        with pytest.raises(GenerationError):
            parse_model(json.dumps(content_payload(explanations=[])), SubtopicContent)

    def test_empty_questions_are_rejected(self):
        with pytest.raises(GenerationError):
            parse_model(json.dumps(content_payload(questions=[])), SubtopicContent)

    def test_wrong_option_count(self):
        question = {"question": "2 + 2?", "options": ["3", "4", "5"], "correct": 1}
        with pytest.raises(GenerationError):
            parse_model(json.dumps(content_payload(questions=[question])), SubtopicContent)

    def test_correct_out_of_range(self):
        question = {"question": "2 + 2?", "options": ["3", "4", "5", "6"], "correct": 4}
        with pytest.raises(GenerationError):
            parse_model(json.dumps(content_payload(questions=[question])), SubtopicContent)

    def test_correct_as_string(self):
        question = {"question": "2 + 2?", "options": ["3", "4", "5", "6"], "correct": "1"}
        with pytest.raises(GenerationError):
            parse_model(json.dumps(content_payload(questions=[question])), SubtopicContent)

    def test_empty_quiz(self):
        with pytest.raises(GenerationError):
            parse_model('{"mcqs": []}', QuizContent)

    def test_outline_missing_topics(self):
        with pytest.raises(GenerationError):
            parse_model('{"courseTitle": "Stats"}', CourseOutline)
