"""Storage - Persistencia no KV do AgentFS."""

from .history_store import HistoryStore
from .question_store import QuestionStore

__all__ = ["QuestionStore", "HistoryStore"]
