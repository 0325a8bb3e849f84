"""
Prompt loader utility for MentorVerse.

Prompt templates live in mentorverse/prompts/ as YAML files with three keys:

    meta:           version, temperature, json (a JSON reply is expected)
    system:         tutor persona and output rules
    user_template:  request text with {placeholders}; literal braces doubled
"""

from pathlib import Path
from string import Formatter
from typing import Any
import yaml


PROMPTS_DIR = Path(__file__).parent.parent / "prompts"

REQUIRED_KEYS = ("meta", "system", "user_template")


def load_prompt(name: str, prompts_dir: Path | None = None) -> dict[str, Any]:
    """
    Load and check a prompt template by name.

    Args:
        name: Prompt name without .yaml extension (e.g., "topic_quiz")
        prompts_dir: Optional custom prompts directory

    Raises:
        FileNotFoundError: If prompt file doesn't exist
        ValueError: If a required key is missing or meta is not a mapping
        yaml.YAMLError: If YAML parsing fails
    """
    file_path = (prompts_dir or PROMPTS_DIR) / f"{name}.yaml"
    if not file_path.exists():
        raise FileNotFoundError(f"Prompt template not found: {file_path}")

    with open(file_path, "r", encoding="utf-8") as f:
        prompt = yaml.safe_load(f) or {}

    missing = [key for key in REQUIRED_KEYS if key not in prompt]
    if missing:
        raise ValueError(f"Prompt template {name} is missing keys: {', '.join(missing)}")
    if not isinstance(prompt["meta"], dict):
        raise ValueError(f"Prompt template {name}: meta must be a mapping")
    return prompt


def template_fields(template: str) -> set[str]:
    """Placeholder names used by a template (doubled braces are not fields)."""
    return {field for _, field, _, _ in Formatter().parse(template) if field}


def format_prompt(template: str, **kwargs) -> str:
    """
    Fill a template's placeholders.

    Raises:
        ValueError: A placeholder has no value
    """
    missing = template_fields(template) - kwargs.keys()
    if missing:
        raise ValueError(f"No value for prompt placeholders: {', '.join(sorted(missing))}")
    return template.format(**kwargs)


def get_available_prompts(prompts_dir: Path | None = None) -> list[str]:
    """Names of the prompt templates in a directory, sorted."""
    dir_path = prompts_dir or PROMPTS_DIR
    if not dir_path.exists():
        return []
    return sorted(p.stem for p in dir_path.glob("*.yaml"))
