"""Question Import Pipeline - Geracao -> validacao -> dedup -> gravacao."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any, Protocol

from pydantic import ValidationError

from ..exceptions import NoUniqueCandidatesError
from ..models.enums import GenerationKind
from ..models.schemas import ImportReport, ImportRequest, QuestionDraft, RawQuestion
from .dedup_engine import QuestionDeduplicationEngine

if TYPE_CHECKING:
    from ..storage import QuestionStore

logger = logging.getLogger(__name__)


class QuestionGenerator(Protocol):
    async def generate(
        self,
        kind: GenerationKind,
        payload: Any,
        subject: str,
        topic: str,
        count: int,
    ) -> Sequence[dict[str, Any] | RawQuestion]: ...


class QuestionImportPipeline:
    """Pipeline de importacao em frente ao bulk_insert.

    Etapas:
        1. Gera candidatos (GenerationError sobe sem gravar nada)
        2. Valida cada candidato bruto (invalidos descartados com warning)
        3. Remove duplicadas por texto normalizado (primeira vence)
        4. Trunca para a quantidade solicitada
        5. Nenhum candidato unico -> NoUniqueCandidatesError, nada gravado
        6. bulk_insert (nao atomico: falha parcial sobe como StoreWriteError)

    Example:
        >>> pipeline = QuestionImportPipeline(generator, store)
        >>> report = await pipeline.run("uid-1", ImportRequest(subject="Physics", topic="Optics", count=5))
        >>> report.inserted
        5
    """

    def __init__(
        self,
        generator: QuestionGenerator,
        store: QuestionStore,
        dedup: QuestionDeduplicationEngine | None = None,
        max_count: int = 100,
    ):
        self.generator = generator
        self.store = store
        self.dedup = dedup or QuestionDeduplicationEngine()
        self.max_count = max_count

    async def run(
        self,
        owner_id: str,
        request: ImportRequest,
        before_insert: Callable[[], None] | None = None,
    ) -> ImportReport:
        """Executa a importacao completa para o dono.

        Args:
            owner_id: Dono das perguntas
            request: Parametros da importacao
            before_insert: Chamado antes do bulk_insert; uma excecao aqui
                aborta a importacao sem gravar nada

        Raises:
            GenerationError: Falha do adaptador de geracao
            NoUniqueCandidatesError: Nenhuma pergunta valida e unica
            StoreWriteError: Falha (total ou parcial) na gravacao
        """
        count = min(request.count, self.max_count)

        raw_items = await self.generator.generate(
            kind=request.kind,
            payload=request.payload,
            subject=request.subject,
            topic=request.topic,
            count=count,
        )

        drafts = self.validate_candidates(raw_items, request.subject, request.topic)
        unique = self.dedup.dedupe(drafts)
        selected = unique[:count]

        if not selected:
            logger.warning(
                f"Importacao abortada para {owner_id}: {len(raw_items)} candidatos, nenhum unico"
            )
            raise NoUniqueCandidatesError(
                details={"generated": len(raw_items), "valid": len(drafts)}
            )

        if before_insert is not None:
            before_insert()

        stored = await self.store.bulk_insert(owner_id, selected)

        logger.info(
            f"Importacao concluida para {owner_id}: {len(raw_items)} gerados, "
            f"{len(drafts)} validos, {len(unique)} unicos, {len(stored)} gravados"
        )

        return ImportReport(
            requested=request.count,
            generated=len(raw_items),
            valid=len(drafts),
            unique=len(unique),
            inserted=len(stored),
            questions=stored,
        )

    def validate_candidates(
        self,
        raw_items: Sequence[dict[str, Any] | RawQuestion],
        subject: str,
        topic: str,
    ) -> list[QuestionDraft]:
        """Converte candidatos brutos em QuestionDraft, descartando invalidos."""
        drafts = []
        for position, item in enumerate(raw_items):
            try:
                raw = item if isinstance(item, RawQuestion) else RawQuestion.model_validate(item)
                drafts.append(raw.to_draft(subject=subject, topic=topic))
            except ValidationError as e:
                logger.warning(
                    f"Candidato {position} descartado: {e.error_count()} erro(s) de validacao"
                )
        return drafts
