"""Quiz Session Engine - Ciclo de vida de uma tentativa cronometrada."""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

from ..exceptions import EmptyQuizError, QuizNotActiveError, QuizPortalError
from ..models.enums import SessionPhase
from ..models.schemas import Question, QuestionView, QuizResult, QuizSessionView
from ..models.state import QuizSessionState, format_time_left
from .scoring_engine import QuizScoringEngine
from .timer import CountdownTimer

if TYPE_CHECKING:
    from ..storage import HistoryStore, QuestionStore

logger = logging.getLogger(__name__)

CompletionCallback = Callable[[QuizResult], Any]


class QuizSessionEngine:
    """Executa uma tentativa: cronometro, respostas, navegacao e submissao.

    Fases:
        LOADING -> IN_PROGRESS -> SUBMITTING -> COMPLETE
        LOADING | IN_PROGRESS -> EXITED (saida explicita, nada e gravado)

    A submissao acontece uma unica vez, seja pelo botao (submit) ou pela
    expiracao do cronometro. O primeiro gatilho vence; os demais retornam
    None sem efeito.

    Example:
        >>> session = QuizSessionEngine(questions, "Physics", "uid-1", qstore, hstore)
        >>> await session.start()
        >>> session.select_answer("5")
        >>> session.next()
        1
        >>> result = await session.submit()
    """

    def __init__(
        self,
        questions: Sequence[Question],
        topic: str,
        owner_id: str,
        question_store: QuestionStore,
        history_store: HistoryStore,
        scoring: QuizScoringEngine | None = None,
        on_complete: CompletionCallback | None = None,
        seconds_per_question: int = 60,
        tick_interval: float = 1.0,
        auto_tick: bool = True,
    ):
        if not questions:
            raise EmptyQuizError()

        self.owner_id = owner_id
        self.question_store = question_store
        self.history_store = history_store
        self.scoring = scoring or QuizScoringEngine()
        self._on_complete = on_complete
        self._auto_tick = auto_tick

        total_seconds = seconds_per_question * len(questions)
        self.state = QuizSessionState(
            questions=tuple(questions),
            topic=topic,
            time_left=total_seconds,
        )
        self.timer = CountdownTimer(
            seconds=total_seconds,
            on_expire=self._on_timer_expired,
            tick_interval=tick_interval,
            on_tick=self._on_tick,
        )

        self.result: QuizResult | None = None
        self._alive = True
        self._submitted = False
        self._bookmark_task: asyncio.Task | None = None
        # IDs alternados nesta sessao prevalecem sobre a carga inicial
        self._toggled_ids: set[str] = set()

    # -------------------------------------------------------------------------
    # Estado
    # -------------------------------------------------------------------------

    @property
    def phase(self) -> SessionPhase:
        return self.state.phase

    @property
    def is_alive(self) -> bool:
        """False apos saida ou conclusao."""
        return self._alive

    @property
    def accepting_answers(self) -> bool:
        return self._alive and self.state.phase == SessionPhase.IN_PROGRESS

    def view(self) -> QuizSessionView:
        state = self.state
        current = state.current_question
        return QuizSessionView(
            topic=state.topic,
            phase=state.phase,
            current_index=state.current_index,
            total_questions=state.total_questions,
            question=QuestionView.from_question(current) if current else None,
            selected_option=state.selected_for(current.id) if current else None,
            answered_count=len(state.answers),
            time_left=state.time_left,
            time_left_display=format_time_left(state.time_left),
            bookmarked=bool(current and current.id in state.bookmark_view),
            bookmark_ids=sorted(state.bookmark_view),
        )

    # -------------------------------------------------------------------------
    # Ciclo de vida
    # -------------------------------------------------------------------------

    async def start(self) -> None:
        """Inicia cronometro e carga dos favoritos em background."""
        if self.state.phase != SessionPhase.LOADING or not self._alive:
            return

        self.state.started_at = int(time.time() * 1000)
        self.state.phase = SessionPhase.IN_PROGRESS
        self._bookmark_task = asyncio.get_running_loop().create_task(self._load_bookmarks())
        if self._auto_tick:
            self.timer.start()

        logger.info(
            f"Quiz iniciado para {self.owner_id}: '{self.state.topic}' "
            f"({self.state.total_questions} perguntas, {self.state.time_left}s)"
        )

    async def wait_bookmarks(self) -> None:
        """Aguarda a carga inicial dos favoritos (se ainda pendente)."""
        task = self._bookmark_task
        if task is None or task.done():
            return
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _load_bookmarks(self) -> None:
        try:
            ids = await self.question_store.get_bookmarks(self.owner_id)
        except QuizPortalError as e:
            logger.warning(f"Falha ao carregar favoritos de {self.owner_id}: {e.message}")
            return

        if not self._alive:
            logger.debug("Carga de favoritos descartada: sessao encerrada")
            return

        loaded = {i for i in ids if self.state.has_question(i) and i not in self._toggled_ids}
        self.state.bookmark_view |= loaded

    def exit(self) -> None:
        """Abandona a tentativa sem gravar resultado.

        Sem efeito depois que a submissao comecou.
        """
        if not self._alive or self.state.phase in (SessionPhase.SUBMITTING, SessionPhase.COMPLETE):
            return

        self._alive = False
        self.timer.stop()
        self._cancel_bookmark_load()
        self.state.phase = SessionPhase.EXITED
        logger.info(f"Quiz abandonado por {self.owner_id}: '{self.state.topic}'")

    def _cancel_bookmark_load(self) -> None:
        task = self._bookmark_task
        if task is not None and not task.done():
            task.cancel()

    # -------------------------------------------------------------------------
    # Respostas e navegacao
    # -------------------------------------------------------------------------

    def select_answer(self, option: str, question_id: str | None = None) -> None:
        """Registra (ou substitui) a resposta de uma pergunta.

        Args:
            option: Texto da alternativa
            question_id: Pergunta alvo (padrao: pergunta atual)

        Raises:
            QuizNotActiveError: Se a tentativa nao aceita mais respostas
            ValueError: Se a pergunta nao pertence a tentativa ou a
                alternativa nao existe
        """
        if not self.accepting_answers:
            raise QuizNotActiveError(
                message="A tentativa nao aceita mais respostas",
                details={"phase": self.state.phase.value},
            )

        question = self._question(question_id)
        if option not in question.options:
            raise ValueError(f"Alternativa inexistente para a pergunta {question.id}")

        self.state.answers[question.id] = option

    def go_to(self, index: int) -> int:
        self.state.current_index = self.state.clamp_index(index)
        return self.state.current_index

    def next(self) -> int:
        return self.go_to(self.state.current_index + 1)

    def previous(self) -> int:
        return self.go_to(self.state.current_index - 1)

    def _question(self, question_id: str | None) -> Question:
        if question_id is None:
            return self.state.current_question
        for question in self.state.questions:
            if question.id == question_id:
                return question
        raise ValueError(f"Pergunta {question_id} nao pertence a esta tentativa")

    # -------------------------------------------------------------------------
    # Favoritos
    # -------------------------------------------------------------------------

    async def toggle_bookmark(self, question_id: str | None = None) -> bool:
        """Alterna favorito no store e reflete na visao da sessao.

        Raises:
            QuizNotActiveError: Se a sessao foi encerrada
            StoreWriteError: Se a gravacao falhar (visao inalterada)
        """
        if not self._alive:
            raise QuizNotActiveError()

        question = self._question(question_id)
        bookmarked = await self.question_store.toggle_bookmark(self.owner_id, question.id)

        if self._alive:
            self._toggled_ids.add(question.id)
            if bookmarked:
                self.state.bookmark_view.add(question.id)
            else:
                self.state.bookmark_view.discard(question.id)
        return bookmarked

    # -------------------------------------------------------------------------
    # Submissao
    # -------------------------------------------------------------------------

    async def submit(self) -> QuizResult | None:
        """Submissao manual.

        Returns:
            Resultado, ou None se a tentativa ja foi submetida/encerrada
        """
        return await self._submit(trigger="manual")

    async def _on_timer_expired(self) -> None:
        await self._submit(trigger="timer")

    def _on_tick(self, remaining: int) -> None:
        self.state.time_left = remaining

    async def _submit(self, trigger: str) -> QuizResult | None:
        # Check-and-set sem await no meio: so um gatilho passa
        if self._submitted or not self.accepting_answers:
            logger.debug(f"Submissao ({trigger}) ignorada na fase {self.state.phase.value}")
            return None
        self._submitted = True

        self.timer.stop()
        self._cancel_bookmark_load()
        self.state.phase = SessionPhase.SUBMITTING

        result = self.scoring.build_result(
            owner_id=self.owner_id,
            topic=self.state.topic,
            questions=self.state.questions,
            answers=dict(self.state.answers),
        )

        try:
            await self.history_store.save_result(result)
        except Exception:
            logger.exception(f"Falha ao gravar historico {result.id} de {self.owner_id}")

        self.result = result
        self.state.phase = SessionPhase.COMPLETE
        self._alive = False
        logger.info(
            f"Quiz concluido ({trigger}) por {self.owner_id}: "
            f"{result.score}/{result.total_questions}"
        )

        if self._on_complete is not None:
            outcome = self._on_complete(result)
            if inspect.isawaitable(outcome):
                await outcome
        return result
