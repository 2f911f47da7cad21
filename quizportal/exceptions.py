"""QuizPortal Exceptions - Taxonomia de erros do dominio.

Todas as excecoes carregam `message` (texto para o usuario) e `details`
(contexto estruturado para log/resposta HTTP).
"""

from typing import Any


class QuizPortalError(Exception):
    """Erro base da aplicacao."""

    def __init__(self, message: str = "", details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


# =============================================================================
# IDENTIDADE
# =============================================================================


class AuthError(QuizPortalError):
    """Falha do provedor de identidade."""

    code = "auth/unknown"


class PopupDismissedError(AuthError):
    """Usuario fechou o popup de login (nao e exibido como erro)."""

    code = "auth/popup-closed-by-user"


class DomainUnauthorizedError(AuthError):
    """Origem atual nao autorizada no provedor de identidade."""

    code = "auth/unauthorized-domain"

    def __init__(self, origin: str, message: str = "", details: dict[str, Any] | None = None):
        self.origin = origin
        details = {**(details or {}), "origin": origin}
        super().__init__(
            message
            or "Dominio nao autorizado. Adicione o dominio abaixo em Authentication -> "
            "Settings -> Authorized Domains no console do provedor.",
            details,
        )


class UnknownAuthError(AuthError):
    """Qualquer outra falha de login."""

    def __init__(self, message: str = "", code: str = "auth/unknown", details: dict[str, Any] | None = None):
        self.code = code
        super().__init__(
            message or "Erro inesperado no login.",
            {**(details or {}), "code": code},
        )


class NoIdentityError(QuizPortalError):
    """Operacao de dono sem identidade atual."""


class InvalidOwnerIdError(QuizPortalError):
    """ID de dono invalido como chave de particao."""


# =============================================================================
# GERACAO / IMPORTACAO
# =============================================================================


class GenerationError(QuizPortalError):
    """Falha do adaptador de geracao (repassada sem alteracao para a UI)."""


class QuestionImportError(QuizPortalError):
    """Importacao abortada; nada foi gravado."""


class NoUniqueCandidatesError(QuestionImportError):
    """Nenhuma pergunta unica restou apos validacao e deduplicacao."""

    def __init__(self, message: str = "", details: dict[str, Any] | None = None):
        super().__init__(message or "Nenhuma pergunta unica foi gerada.", details)


# =============================================================================
# ARMAZENAMENTO
# =============================================================================


class StoreError(QuizPortalError):
    """Erro base de armazenamento."""


class StoreWriteError(StoreError):
    """Falha de escrita (details pode listar ids gravados e com falha)."""


class StoreReadError(StoreError):
    """Falha total de leitura."""


# =============================================================================
# QUIZ
# =============================================================================


class EmptyQuizError(QuizPortalError):
    """Nenhuma pergunta encontrada para a selecao."""

    def __init__(self, message: str = "", details: dict[str, Any] | None = None):
        super().__init__(message or "Nenhuma pergunta encontrada para esta selecao.", details)


class QuizNotActiveError(QuizPortalError):
    """Nao ha tentativa em andamento aceitando esta operacao."""

    def __init__(self, message: str = "", details: dict[str, Any] | None = None):
        super().__init__(message or "Nenhum quiz em andamento.", details)


class ResultNotFoundError(QuizPortalError):
    """Resultado (ou historico) inexistente para o dono atual."""
