"""Review Index Builder - Reconstroi as perguntas de um resultado."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..models.schemas import Question, QuizResult, ReviewEntry

if TYPE_CHECKING:
    from ..storage import QuestionStore


class ReviewIndexBuilder:
    """Resolve os IDs de um QuizResult para perguntas completas.

    A ordem segue a sequencia de details do resultado, nunca a ordem do
    store. IDs que nao existem mais sao descartados.
    """

    def __init__(self, store: QuestionStore):
        self.store = store

    async def build(self, owner_id: str, result: QuizResult) -> list[Question]:
        by_id = await self._resolve(owner_id, result)
        return [by_id[d.question_id] for d in result.details if d.question_id in by_id]

    async def build_entries(self, owner_id: str, result: QuizResult) -> list[ReviewEntry]:
        """Pares (pergunta, detalhe) na ordem do resultado."""
        by_id = await self._resolve(owner_id, result)
        return [
            ReviewEntry(question=by_id[d.question_id], detail=d)
            for d in result.details
            if d.question_id in by_id
        ]

    async def _resolve(self, owner_id: str, result: QuizResult) -> dict[str, Question]:
        ids = [detail.question_id for detail in result.details]
        questions = await self.store.lookup_by_ids(owner_id, ids)
        return {q.id: q for q in questions}
