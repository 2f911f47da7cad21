"""Quiz State - Estado em memoria da tentativa e contexto da sessao."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .enums import SessionPhase
from .schemas import Identity, Question, QuizResult

if TYPE_CHECKING:
    from ..engine.session_engine import QuizSessionEngine


def format_time_left(seconds: int) -> str:
    """Formata segundos restantes como m:ss."""
    seconds = max(0, seconds)
    return f"{seconds // 60}:{seconds % 60:02d}"


@dataclass
class QuizSessionState:
    """Estado completo de uma tentativa em andamento.

    Nunca persistido durante a tentativa.

    Attributes:
        questions: Perguntas congeladas para a tentativa (ordem fixa)
        topic: Rotulo do quiz
        answers: question_id -> alternativa selecionada
        current_index: Pergunta exibida (0..N-1)
        time_left: Segundos restantes
        bookmark_view: IDs favoritados visiveis nesta sessao
        phase: Fase do ciclo de vida
        started_at: Epoch (ms) de inicio
    """

    questions: tuple[Question, ...]
    topic: str
    answers: dict[str, str] = field(default_factory=dict)
    current_index: int = 0
    time_left: int = 0
    bookmark_view: set[str] = field(default_factory=set)
    phase: SessionPhase = SessionPhase.LOADING
    started_at: int = 0

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def current_question(self) -> Question | None:
        if not self.questions:
            return None
        return self.questions[self.current_index]

    def has_question(self, question_id: str) -> bool:
        return any(q.id == question_id for q in self.questions)

    def clamp_index(self, index: int) -> int:
        """Limita indice a [0, N-1]."""
        return max(0, min(index, self.total_questions - 1))

    def selected_for(self, question_id: str) -> str | None:
        return self.answers.get(question_id)


@dataclass
class SessionContext:
    """Contexto explicito da aplicacao, passado por referencia aos componentes.

    Attributes:
        identity: Identidade atual (None = nao autenticado)
        active_quiz: Engine da tentativa em andamento
        last_result: Ultimo resultado concluido (para revisao)
        login_error: Ultimo erro de login exibivel
    """

    identity: Identity | None = None
    active_quiz: QuizSessionEngine | None = None
    last_result: QuizResult | None = None
    login_error: dict[str, Any] | None = None

    @property
    def owner_id(self) -> str | None:
        return self.identity.id if self.identity else None
