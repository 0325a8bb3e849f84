"""Errors raised by the generation layer."""


class GenerationError(Exception):
    """The generation service failed or returned unusable content."""
