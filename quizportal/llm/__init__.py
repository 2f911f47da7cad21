"""QuizPortal LLM - Adaptador de geracao (Claude Agent SDK)."""

from .factory import LLMClientFactory
from .generator import ClaudeQuestionGenerator, extract_json_array, split_data_url

__all__ = [
    "ClaudeQuestionGenerator",
    "LLMClientFactory",
    "extract_json_array",
    "split_data_url",
]
