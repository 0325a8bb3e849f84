"""
LLM response parsing.

Extracts the JSON payload from a model reply and validates it against a
schema. Shape mismatches are rejected, never repaired.
"""

import json
import re
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from .errors import GenerationError

ModelT = TypeVar("ModelT", bound=BaseModel)

CODE_BLOCK_PATTERN = re.compile(r'```(?:json)?\s*([\s\S]*?)```')


def extract_json_from_response(text: str) -> dict:
    """Extract JSON from LLM response, handling markdown code blocks."""
    if not text or not text.strip():
        raise GenerationError("Empty response from generation service")

    # Try to find JSON in code blocks first
    for match in CODE_BLOCK_PATTERN.findall(text):
        try:
            return _as_object(json.loads(match.strip()))
        except json.JSONDecodeError:
            continue

    text = text.strip()

    # Try to find the first balanced top-level object
    start = text.find('{')
    if start >= 0:
        brace_count = 0
        in_string = False
        escaped = False
        for i in range(start, len(text)):
            char = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif char == '\\':
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == '{':
                brace_count += 1
            elif char == '}':
                brace_count -= 1
                if brace_count == 0:
                    try:
                        return _as_object(json.loads(text[start:i + 1]))
                    except json.JSONDecodeError:
                        break

    try:
        return _as_object(json.loads(text))
    except json.JSONDecodeError as e:
        raise GenerationError(f"Could not extract JSON from response: {e}\n\nResponse:\n{text[:500]}...") from e


def _as_object(value) -> dict:
    if not isinstance(value, dict):
        raise GenerationError(f"Expected a JSON object, got {type(value).__name__}")
    return value


def parse_model(text: str, model: type[ModelT]) -> ModelT:
    """
    Parse a model reply into a validated schema instance.

    Raises:
        GenerationError: If no JSON object is found or it does not match the schema
    """
    payload = extract_json_from_response(text)
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise GenerationError(f"Invalid {model.__name__} structure: {e}") from e
