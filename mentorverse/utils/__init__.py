"""MentorVerse utilities."""

from .prompt_loader import load_prompt, format_prompt, get_available_prompts, template_fields

__all__ = ["load_prompt", "format_prompt", "get_available_prompts", "template_fields"]
