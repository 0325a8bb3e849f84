"""
Gemini API client wrapper.

Sends one system instruction plus one user prompt per call and returns
the reply text. Transient failures are retried with a growing delay;
calls can be paced for batch jobs such as the course pre-generation script.
"""

import logging
import os
import time
from typing import Optional

from google import genai
from google.genai import types as genai_types

from mentorverse.config import DEFAULT_MODEL

logger = logging.getLogger(__name__)


def _response_text(response) -> str:
    """Reply text, falling back to the text parts of the first candidate."""
    if response.text:
        return response.text
    if response.candidates:
        content = response.candidates[0].content
        if content and content.parts:
            text = "".join(part.text for part in content.parts if part.text)
            if text:
                return text
    raise ValueError("Empty response from API")


class GeminiClient:
    """Gemini text generation with retries and optional pacing."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL,
        temperature: float = 0.7,
        sleep_seconds: float = 0.0,
        retry_delay: float = 0.5,
    ):
        self.api_key = api_key or os.environ.get("GEMINI_API_KEY") or os.environ.get("GOOGLE_GEMINI_API_KEY")
        if not self.api_key:
            raise ValueError("GEMINI_API_KEY not set. Check your .env file.")

        self.client = genai.Client(api_key=self.api_key)
        self.model_name = model
        self.temperature = temperature
        self.sleep_seconds = sleep_seconds
        self.retry_delay = retry_delay

    def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        json_mode: bool = False,
        temperature: Optional[float] = None,
        max_retries: int = 3,
    ) -> str:
        """
        Generate a reply.

        Args:
            system_prompt: Tutor persona and output rules
            user_prompt: The formatted request
            json_mode: Ask the API for an application/json reply
            temperature: Overrides the client default for this call
            max_retries: Attempts before the last error is raised

        Returns:
            Reply text (not yet parsed)
        """
        config = genai_types.GenerateContentConfig(
            system_instruction=system_prompt,
            temperature=self.temperature if temperature is None else temperature,
            response_mime_type="application/json" if json_mode else None,
        )

        for attempt in range(1, max_retries + 1):
            try:
                response = self.client.models.generate_content(
                    model=self.model_name,
                    contents=user_prompt,
                    config=config,
                )
                text = _response_text(response)
            except Exception as e:
                if attempt == max_retries:
                    logger.error(f"Gemini call failed after {max_retries} attempts: {e}")
                    raise
                delay = self.retry_delay * 2 ** (attempt - 1)
                logger.warning(f"Gemini call failed (attempt {attempt}/{max_retries}), retrying in {delay:.1f}s: {e}")
                time.sleep(delay)
                continue

            if self.sleep_seconds:
                time.sleep(self.sleep_seconds)
            return text
