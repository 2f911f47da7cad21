"""History Store - Historico append-only de resultados por dono."""

import logging

from pydantic import ValidationError

from ..exceptions import StoreReadError, StoreWriteError
from ..models.schemas import QuizResult
from ..utils.validators import validate_record_id
from .base import OwnerScopedStore

logger = logging.getLogger(__name__)


class HistoryStore(OwnerScopedStore):
    """Resultados de quiz por dono.

    Estrutura de chaves:
        - users:{owner_id}:quizHistory:{result_id} -> QuizResult
    """

    COLLECTION = "quizHistory"

    def _result_key(self, owner_id: str, result_id: str) -> str:
        return self._document_key(owner_id, result_id)

    async def save_result(self, result: QuizResult) -> None:
        """Grava resultado (imutavel, um documento por resultado).

        Raises:
            StoreWriteError: Se a gravacao falhar
        """
        key = self._result_key(result.owner_id, result.id)
        try:
            await self.agentfs.kv.set(key, result.model_dump(mode="json"))
        except Exception as e:
            raise StoreWriteError(
                message="Falha ao gravar resultado",
                details={"owner_id": result.owner_id, "result_id": result.id, "error": str(e)},
            ) from e

        logger.debug(f"Resultado salvo: {result.owner_id}/{result.id}")

    async def list_results(self, owner_id: str) -> list[QuizResult]:
        """Lista resultados do dono, do mais antigo ao mais recente."""
        documents = await self._read_documents(self._collection_prefix(owner_id))

        results = []
        for key, data in documents:
            try:
                results.append(QuizResult.model_validate(data))
            except ValidationError:
                logger.debug(f"Resultado malformado ignorado: {key}")

        return sorted(results, key=lambda r: r.timestamp)

    async def get_result(self, owner_id: str, result_id: str) -> QuizResult | None:
        if not validate_record_id(result_id):
            return None

        key = self._result_key(owner_id, result_id)
        try:
            data = await self.agentfs.kv.get(key)
        except Exception as e:
            raise StoreReadError(
                message="Falha ao ler resultado",
                details={"owner_id": owner_id, "result_id": result_id, "error": str(e)},
            ) from e

        if data is None:
            return None
        try:
            return QuizResult.model_validate(data)
        except ValidationError:
            logger.debug(f"Resultado malformado ignorado: {key}")
            return None
