"""QuizPortal Models - Enums, Schemas e State."""

from .enums import AuthState, GenerationKind, IdentityKind, SessionPhase
from .normalization import normalize_text, resolve_correct_answer
from .schemas import (
    BOOKMARKS_TOPIC,
    FULL_COUNT,
    GUEST_ID_PREFIX,
    RANDOM_TOPIC,
    RANDOM_TOPIC_LABEL,
    AnswerRequest,
    AuthStatusResponse,
    BookmarkToggleResponse,
    ChartPoint,
    DashboardStats,
    ExplainRequest,
    Identity,
    ImportReport,
    ImportRequest,
    NavigateRequest,
    ProviderEventRequest,
    ProviderUser,
    Question,
    QuestionDraft,
    QuestionView,
    QuizResult,
    QuizSessionView,
    RawQuestion,
    ResultDetail,
    ReviewEntry,
    StartQuizRequest,
    TextResponse,
)
from .state import QuizSessionState, SessionContext, format_time_left

__all__ = [
    # Enums
    "AuthState",
    "GenerationKind",
    "IdentityKind",
    "SessionPhase",
    # Normalizacao
    "normalize_text",
    "resolve_correct_answer",
    # Constantes
    "BOOKMARKS_TOPIC",
    "FULL_COUNT",
    "GUEST_ID_PREFIX",
    "RANDOM_TOPIC",
    "RANDOM_TOPIC_LABEL",
    # Schemas
    "Identity",
    "ProviderUser",
    "Question",
    "QuestionDraft",
    "QuestionView",
    "RawQuestion",
    "ResultDetail",
    "QuizResult",
    "ReviewEntry",
    "ImportRequest",
    "ImportReport",
    "StartQuizRequest",
    "AnswerRequest",
    "NavigateRequest",
    "ProviderEventRequest",
    "ExplainRequest",
    "TextResponse",
    "AuthStatusResponse",
    "BookmarkToggleResponse",
    "QuizSessionView",
    "ChartPoint",
    "DashboardStats",
    # State
    "QuizSessionState",
    "SessionContext",
    "format_time_left",
]
