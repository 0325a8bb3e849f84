"""MentorVerse - personalized LLM-generated courses with an interactive learning session."""

__version__ = "0.1.0"
