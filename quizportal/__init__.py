"""QuizPortal - Quizzes cronometrados com identidade reconciliada.

Arquitetura:
- models/: Enums, Schemas Pydantic, estado da sessao
- identity/: Provedor, IdentityReconciler, artefatos locais
- storage/: QuestionStore, HistoryStore (AgentFS KV)
- engine/: Sessao, cronometro, pontuacao, dedup, importacao, revisao
- llm/: LLMClientFactory, ClaudeQuestionGenerator
- prompts/: Templates de prompts
- controller.py: Dono do SessionContext
- router.py: FastAPI endpoints
"""

from .config import QuizPortalConfig, get_config, reload_config
from .controller import QuizPortalController
from .engine import (
    CountdownTimer,
    QuestionDeduplicationEngine,
    QuestionImportPipeline,
    QuizScoringEngine,
    QuizSessionEngine,
    ReviewIndexBuilder,
)
from .identity import ExternalIdentityProvider, IdentityReconciler, LocalArtifactStore
from .llm import ClaudeQuestionGenerator, LLMClientFactory
from .models import Identity, Question, QuizResult, SessionContext
from .storage import HistoryStore, QuestionStore

__all__ = [
    # Config
    "QuizPortalConfig",
    "get_config",
    "reload_config",
    # Controller
    "QuizPortalController",
    # Models
    "Identity",
    "Question",
    "QuizResult",
    "SessionContext",
    # Identity
    "ExternalIdentityProvider",
    "IdentityReconciler",
    "LocalArtifactStore",
    # Engines
    "CountdownTimer",
    "QuestionDeduplicationEngine",
    "QuestionImportPipeline",
    "QuizScoringEngine",
    "QuizSessionEngine",
    "ReviewIndexBuilder",
    # LLM
    "ClaudeQuestionGenerator",
    "LLMClientFactory",
    # Storage
    "HistoryStore",
    "QuestionStore",
]
