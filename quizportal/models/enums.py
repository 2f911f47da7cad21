"""QuizPortal Enums - Tipos de identidade, estados e modos de geracao."""

from enum import Enum


class IdentityKind(str, Enum):
    """Origem da identidade."""

    AUTHENTICATED = "authenticated"  # Provedor remoto
    GUEST = "guest"  # Sintetizada localmente


class AuthState(str, Enum):
    """Estados do reconciliador de identidade."""

    UNAUTHENTICATED = "unauthenticated"
    GUEST = "guest"
    AUTHENTICATED = "authenticated"


class SessionPhase(str, Enum):
    """Ciclo de vida de uma tentativa de quiz."""

    LOADING = "loading"
    IN_PROGRESS = "in_progress"
    SUBMITTING = "submitting"
    COMPLETE = "complete"
    EXITED = "exited"  # Saida explicita, sem resultado


class GenerationKind(str, Enum):
    """Fonte do material de geracao."""

    TEXT = "text"
    IMAGE = "image"
    FILE = "file"
