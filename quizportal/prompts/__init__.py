"""QuizPortal Prompts - Templates de prompts."""

from .templates import (
    EXPLAIN_PROMPT,
    FILE_GENERATION_PROMPT,
    GENERATION_SYSTEM_PROMPT,
    IMAGE_GENERATION_PROMPT,
    NO_ANSWER_LABEL,
    QUESTION_FORMAT,
    STUDY_PLAN_PROMPT,
    TEXT_GENERATION_PROMPT,
    TUTOR_SYSTEM_PROMPT,
)

__all__ = [
    "EXPLAIN_PROMPT",
    "FILE_GENERATION_PROMPT",
    "GENERATION_SYSTEM_PROMPT",
    "IMAGE_GENERATION_PROMPT",
    "NO_ANSWER_LABEL",
    "QUESTION_FORMAT",
    "STUDY_PLAN_PROMPT",
    "TEXT_GENERATION_PROMPT",
    "TUTOR_SYSTEM_PROMPT",
]
