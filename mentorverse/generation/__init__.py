"""
MentorVerse Generation - LLM-backed content generation.

This module provides:
- GeminiClient: google-genai wrapper with retries
- GenerationService: prompts + validated parsing for every generation call
- GenerationError: raised on unreachable service or unusable replies
"""

from .errors import GenerationError
from .parsing import extract_json_from_response, parse_model
from .service import GenerationService, TextGenerator
from .client import GeminiClient

__all__ = [
    "GenerationError",
    "extract_json_from_response",
    "parse_model",
    "GenerationService",
    "TextGenerator",
    "GeminiClient",
]
