"""QuizPortal Controller - Dono do SessionContext e orquestrador dos componentes.

Substitui o estado global da aplicacao: o controller recebe o contexto
explicitamente e o repassa por referencia ao reconciliador e as sessoes.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Sequence
from typing import TYPE_CHECKING

from .config import QuizPortalConfig, get_config
from .engine import (
    QuestionImportPipeline,
    QuizScoringEngine,
    QuizSessionEngine,
    ReviewIndexBuilder,
)
from .exceptions import EmptyQuizError, NoIdentityError, QuizNotActiveError, ResultNotFoundError
from .identity import ExternalIdentityProvider, IdentityReconciler, LocalArtifactStore
from .identity.provider import IdentityProvider
from .llm import ClaudeQuestionGenerator, LLMClientFactory
from .models.enums import AuthState
from .models.schemas import (
    BOOKMARKS_TOPIC,
    FULL_COUNT,
    RANDOM_TOPIC,
    RANDOM_TOPIC_LABEL,
    ChartPoint,
    DashboardStats,
    Identity,
    ImportReport,
    ImportRequest,
    Question,
    QuizResult,
    ReviewEntry,
)
from .models.state import SessionContext
from .storage import HistoryStore, QuestionStore

if TYPE_CHECKING:
    from agentfs_sdk import AgentFS

logger = logging.getLogger(__name__)

CHART_WINDOW = 10


class QuizPortalController:
    """Controller de topo da aplicacao.

    Example:
        >>> controller = QuizPortalController.create(agentfs, local_agentfs, provider)
        >>> await controller.start()
        >>> await controller.continue_as_guest()
        >>> session = await controller.start_quiz("Random", 10)
    """

    def __init__(
        self,
        reconciler: IdentityReconciler,
        question_store: QuestionStore,
        history_store: HistoryStore,
        artifacts: LocalArtifactStore,
        pipeline: QuestionImportPipeline,
        generator: ClaudeQuestionGenerator,
        config: QuizPortalConfig | None = None,
        scoring: QuizScoringEngine | None = None,
        rng: random.Random | None = None,
    ):
        self.config = config or get_config()
        self.reconciler = reconciler
        self.context: SessionContext = reconciler.context
        self.question_store = question_store
        self.history_store = history_store
        self.artifacts = artifacts
        self.pipeline = pipeline
        self.generator = generator
        self.scoring = scoring or QuizScoringEngine()
        self.review_builder = ReviewIndexBuilder(question_store)
        self._rng = rng or random.Random()
        self._unsubscribe = reconciler.on_change(self._on_identity_change)

    @classmethod
    def create(
        cls,
        agentfs: AgentFS,
        local_agentfs: AgentFS,
        provider: IdentityProvider,
        generator: ClaudeQuestionGenerator | None = None,
        config: QuizPortalConfig | None = None,
    ) -> QuizPortalController:
        """Monta o grafo completo de componentes a partir dos AgentFS."""
        config = config or get_config()

        question_store = QuestionStore(agentfs)
        history_store = HistoryStore(agentfs)
        artifacts = LocalArtifactStore(local_agentfs)
        generator = generator or ClaudeQuestionGenerator(
            factory=LLMClientFactory(config.generation_model),
            max_source_chars=config.max_source_chars,
            max_images=config.max_images,
        )

        reconciler = IdentityReconciler(
            provider=provider,
            artifacts=artifacts,
            context=SessionContext(),
            origin=config.app_origin,
            guest_data_stores=(question_store, history_store),
        )
        pipeline = QuestionImportPipeline(
            generator=generator,
            store=question_store,
            max_count=config.max_import_count,
        )

        return cls(
            reconciler=reconciler,
            question_store=question_store,
            history_store=history_store,
            artifacts=artifacts,
            pipeline=pipeline,
            generator=generator,
            config=config,
        )

    # -------------------------------------------------------------------------
    # Ciclo de vida
    # -------------------------------------------------------------------------

    async def start(self) -> None:
        await self.reconciler.start()

    async def shutdown(self) -> None:
        self._drop_active_quiz()
        self.reconciler.stop()

    def apply_config(self, config: QuizPortalConfig) -> None:
        """Aplica nova configuracao a novas tentativas e importacoes.

        Sessoes em andamento mantem o cronometro com que foram criadas.
        """
        self.config = config
        self.pipeline.max_count = config.max_import_count

    # -------------------------------------------------------------------------
    # Identidade
    # -------------------------------------------------------------------------

    @property
    def identity(self) -> Identity | None:
        return self.context.identity

    @property
    def auth_state(self) -> AuthState:
        return self.reconciler.state

    def require_owner(self) -> str:
        """Retorna o owner_id atual.

        Raises:
            NoIdentityError: Se ninguem estiver logado
        """
        owner_id = self.context.owner_id
        if owner_id is None:
            raise NoIdentityError(message="Entre ou continue como convidado")
        return owner_id

    def ensure_owner(self, owner_id: str) -> None:
        """Confirma que a identidade nao mudou desde que owner_id foi lido.

        Raises:
            NoIdentityError: Se a identidade mudou durante a operacao
        """
        if self.context.owner_id != owner_id:
            logger.warning(f"Identidade alterada durante operacao de {owner_id}; resultado descartado")
            raise NoIdentityError(
                message="Identidade alterada durante a operacao",
                details={"owner_id": owner_id},
            )

    async def continue_as_guest(self) -> Identity:
        return await self.reconciler.continue_as_guest()

    async def sign_in(self) -> Identity | None:
        return await self.reconciler.sign_in()

    async def sign_out(self) -> None:
        await self.reconciler.sign_out()

    async def provider_event(self, identity: Identity | None) -> None:
        """Repassa um evento externo do provedor aos assinantes."""
        provider = self.reconciler.provider
        if isinstance(provider, ExternalIdentityProvider):
            await provider.publish(identity)
        else:
            await self.reconciler.handle_provider_push(identity)

    async def _on_identity_change(self, previous: Identity | None, current: Identity | None) -> None:
        self._drop_active_quiz()
        self.context.last_result = None
        logger.debug(
            f"Identidade alterada: {previous.id if previous else None} -> "
            f"{current.id if current else None}"
        )

    # -------------------------------------------------------------------------
    # Perguntas e favoritos
    # -------------------------------------------------------------------------

    async def list_questions(self, use_cache: bool = False) -> list[Question]:
        """Lista perguntas do dono e atualiza o cache local.

        Args:
            use_cache: Le do cache local (sem acesso ao store duravel)
        """
        owner_id = self.require_owner()
        if use_cache:
            questions = await self.artifacts.load_question_cache(owner_id)
            self.ensure_owner(owner_id)
            return questions

        questions = await self.question_store.list_all(owner_id)
        self.ensure_owner(owner_id)
        await self.artifacts.save_question_cache(owner_id, questions)
        return questions

    async def import_questions(self, request: ImportRequest) -> ImportReport:
        owner_id = self.require_owner()
        report = await self.pipeline.run(
            owner_id, request, before_insert=lambda: self.ensure_owner(owner_id)
        )
        self.ensure_owner(owner_id)
        return report

    async def list_bookmarks(self) -> list[str]:
        owner_id = self.require_owner()
        bookmarks = await self.question_store.get_bookmarks(owner_id)
        self.ensure_owner(owner_id)
        return bookmarks

    async def toggle_bookmark(self, question_id: str) -> bool:
        owner_id = self.require_owner()
        bookmarked = await self.question_store.toggle_bookmark(owner_id, question_id)
        self.ensure_owner(owner_id)
        return bookmarked

    # -------------------------------------------------------------------------
    # Quiz
    # -------------------------------------------------------------------------

    @property
    def active_quiz(self) -> QuizSessionEngine | None:
        return self.context.active_quiz

    def require_active_quiz(self) -> QuizSessionEngine:
        session = self.context.active_quiz
        if session is None:
            raise QuizNotActiveError()
        return session

    async def select_questions(
        self,
        topic: str = RANDOM_TOPIC,
        count: int | str | None = None,
        bookmark_mode: bool = False,
    ) -> tuple[list[Question], str]:
        """Seleciona as perguntas e o rotulo de uma nova tentativa.

        Modo favoritos: todos os favoritos, na ordem do conjunto.
        Demais: filtro por topico (ou todos em Random), embaralhado e
        truncado para `count` ("Full" = sem limite).

        Raises:
            EmptyQuizError: Nenhuma pergunta para a selecao
        """
        owner_id = self.require_owner()

        if bookmark_mode:
            ids = await self.question_store.get_bookmarks(owner_id)
            found = {q.id: q for q in await self.question_store.lookup_by_ids(owner_id, ids)}
            questions = [found[i] for i in ids if i in found]
            label = BOOKMARKS_TOPIC
            self.ensure_owner(owner_id)
        else:
            pool = await self.list_questions()
            if topic not in (RANDOM_TOPIC, RANDOM_TOPIC_LABEL):
                pool = [q for q in pool if q.topic == topic]

            questions = list(pool)
            self._rng.shuffle(questions)
            if count is None:
                count = self.config.default_question_count
            if count != FULL_COUNT:
                questions = questions[: int(count)]
            label = topic

        if not questions:
            raise EmptyQuizError(details={"topic": label, "bookmark_mode": bookmark_mode})
        return questions, label

    async def start_quiz(
        self,
        topic: str = RANDOM_TOPIC,
        count: int | str | None = None,
        bookmark_mode: bool = False,
    ) -> QuizSessionEngine:
        """Cria e inicia uma nova tentativa, encerrando a anterior."""
        owner_id = self.require_owner()
        questions, label = await self.select_questions(topic, count, bookmark_mode)
        self.ensure_owner(owner_id)

        self._drop_active_quiz()
        session = self._build_session(owner_id, questions, label)
        self.context.active_quiz = session
        self.context.last_result = None
        await session.start()
        return session

    def _build_session(
        self, owner_id: str, questions: Sequence[Question], label: str
    ) -> QuizSessionEngine:
        session: QuizSessionEngine | None = None

        def on_complete(result: QuizResult) -> None:
            # Ignora conclusao de sessao substituida ou de outra identidade
            if self.context.active_quiz is session and self.context.owner_id == owner_id:
                self.context.last_result = result
                self.context.active_quiz = None

        session = QuizSessionEngine(
            questions=questions,
            topic=label,
            owner_id=owner_id,
            question_store=self.question_store,
            history_store=self.history_store,
            scoring=self.scoring,
            on_complete=on_complete,
            seconds_per_question=self.config.seconds_per_question,
            tick_interval=self.config.tick_interval,
        )
        return session

    async def submit_quiz(self) -> QuizResult:
        """Submissao manual da tentativa ativa.

        Raises:
            QuizNotActiveError: Sem tentativa ativa ou ja submetida
        """
        session = self.require_active_quiz()
        result = await session.submit()
        if result is None:
            raise QuizNotActiveError(message="Tentativa ja submetida")
        return result

    def exit_quiz(self) -> None:
        self.require_active_quiz()
        self._drop_active_quiz()

    def _drop_active_quiz(self) -> None:
        session = self.context.active_quiz
        if session is not None:
            session.exit()
            self.context.active_quiz = None

    # -------------------------------------------------------------------------
    # Historico e revisao
    # -------------------------------------------------------------------------

    async def history(self) -> list[QuizResult]:
        owner_id = self.require_owner()
        results = await self.history_store.list_results(owner_id)
        self.ensure_owner(owner_id)
        return results

    async def review(self, result_id: str | None = None) -> tuple[QuizResult, list[ReviewEntry]]:
        """Entradas de revisao do ultimo resultado ou de um resultado salvo.

        Raises:
            ResultNotFoundError: Sem resultado para revisar
        """
        owner_id = self.require_owner()

        if result_id is None:
            result = self.context.last_result
        else:
            result = await self.history_store.get_result(owner_id, result_id)

        if result is None or result.owner_id != owner_id:
            raise ResultNotFoundError(
                message="Nenhum resultado para revisar",
                details={"result_id": result_id},
            )

        entries = await self.review_builder.build_entries(owner_id, result)
        self.ensure_owner(owner_id)
        return result, entries

    async def dashboard(self) -> DashboardStats:
        owner_id = self.require_owner()
        questions, bookmarks, history = await asyncio.gather(
            self.question_store.list_all(owner_id),
            self.question_store.get_bookmarks(owner_id),
            self.history_store.list_results(owner_id),
        )
        self.ensure_owner(owner_id)

        unique = {q.id: q for q in questions}
        topics = sorted({q.topic for q in unique.values()})
        chart = [
            ChartPoint(
                name=f"Q{i + 1}",
                score=r.score / r.total_questions * 100,
                topic=r.topic,
            )
            for i, r in enumerate(history[-CHART_WINDOW:])
        ]

        return DashboardStats(
            total_questions=len(unique),
            bookmarks_count=len(bookmarks),
            unique_topics=len(topics),
            quizzes_taken=len(history),
            topics=[RANDOM_TOPIC_LABEL, *topics],
            chart=chart,
        )

    # -------------------------------------------------------------------------
    # Tutor
    # -------------------------------------------------------------------------

    async def explain(self, question: str, selected: str | None, correct: str) -> str:
        self.require_owner()
        return await self.generator.explain_answer(question, selected, correct)

    async def study_plan(self) -> str:
        history = await self.history()
        if not history:
            raise ResultNotFoundError(message="Faca pelo menos um quiz antes de pedir um plano")
        return await self.generator.generate_study_plan(history)
