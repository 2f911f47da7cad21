"""Question Store - Banco de perguntas e favoritos por dono (AgentFS KV)."""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

from pydantic import ValidationError

if TYPE_CHECKING:
    from agentfs_sdk import AgentFS

from ..exceptions import StoreReadError, StoreWriteError
from ..models.schemas import Question, QuestionDraft
from ..utils.validators import validate_owner_id, validate_record_id
from .base import OwnerScopedStore

logger = logging.getLogger(__name__)


def _new_question_id() -> str:
    return uuid.uuid4().hex


class QuestionStore(OwnerScopedStore):
    """Perguntas e conjunto de favoritos de cada dono.

    Estrutura de chaves:
        - users:{owner_id}:questions:{question_id} -> Question
        - users:{owner_id}:meta:bookmarks -> {"ids": [...]}

    Example:
        >>> store = QuestionStore(agentfs)
        >>> saved = await store.bulk_insert("uid-1", drafts)
        >>> await store.toggle_bookmark("uid-1", saved[0].id)
        True
    """

    COLLECTION = "questions"

    def __init__(self, agentfs: AgentFS, id_factory: Callable[[], str] | None = None):
        super().__init__(agentfs)
        self._id_factory = id_factory or _new_question_id
        self._bookmark_locks: dict[str, asyncio.Lock] = {}

    def _question_key(self, owner_id: str, question_id: str) -> str:
        return self._document_key(owner_id, question_id)

    def _bookmarks_key(self, owner_id: str) -> str:
        return f"{self._owner_prefix(owner_id)}meta:bookmarks"

    def _bookmark_lock(self, owner_id: str) -> asyncio.Lock:
        return self._bookmark_locks.setdefault(owner_id, asyncio.Lock())

    # -------------------------------------------------------------------------
    # Perguntas
    # -------------------------------------------------------------------------

    async def bulk_insert(
        self, owner_id: str, questions: Sequence[QuestionDraft]
    ) -> list[Question]:
        """Grava perguntas com IDs novos atribuidos pelo store.

        IDs informados pelo chamador sao ignorados. As escritas sao feitas
        em paralelo, um documento por pergunta: uma falha nunca deixa uma
        pergunta gravada pela metade, mas o lote NAO e atomico.

        Args:
            owner_id: Dono da colecao
            questions: Perguntas validadas

        Returns:
            Perguntas gravadas, na ordem de entrada

        Raises:
            StoreWriteError: Se alguma escrita falhar (details lista
                written_ids e failed_ids)
        """
        validate_owner_id(owner_id)
        if not questions:
            return []

        stored = [
            Question(id=self._id_factory(), **draft.model_dump(exclude={"id"}))
            for draft in questions
        ]

        results = await asyncio.gather(
            *(
                self.agentfs.kv.set(
                    self._question_key(owner_id, question.id),
                    question.model_dump(mode="json"),
                )
                for question in stored
            ),
            return_exceptions=True,
        )

        failed = [q.id for q, r in zip(stored, results) if isinstance(r, BaseException)]
        if failed:
            written = [q.id for q in stored if q.id not in failed]
            logger.error(
                f"bulk_insert parcial para {owner_id}: "
                f"{len(written)} gravadas, {len(failed)} com falha"
            )
            raise StoreWriteError(
                message=f"{len(failed)} de {len(stored)} perguntas nao foram gravadas",
                details={"owner_id": owner_id, "written_ids": written, "failed_ids": failed},
            )

        logger.info(f"{len(stored)} perguntas gravadas para {owner_id}")
        return stored

    async def list_all(self, owner_id: str) -> list[Question]:
        """Lista todas as perguntas validas do dono.

        Documentos fora do schema (ex: lote gravado como array de
        perguntas) sao ignorados.

        Raises:
            StoreReadError: Se a leitura falhar como um todo
        """
        documents = await self._read_documents(self._collection_prefix(owner_id))

        questions = []
        for key, data in documents:
            try:
                questions.append(Question.model_validate(data))
            except ValidationError:
                logger.debug(f"Documento malformado ignorado: {key}")

        return questions

    async def lookup_by_ids(self, owner_id: str, ids: Sequence[str]) -> list[Question]:
        """Busca perguntas por ID, descartando IDs inexistentes.

        O chamador deve reordenar o resultado se precisar de uma ordem
        especifica.
        """
        validate_owner_id(owner_id)
        wanted = list(dict.fromkeys(i for i in ids if validate_record_id(i)))
        if not wanted:
            return []

        try:
            documents = await asyncio.gather(
                *(self.agentfs.kv.get(self._question_key(owner_id, i)) for i in wanted)
            )
        except Exception as e:
            raise StoreReadError(
                message="Falha ao buscar perguntas por ID",
                details={"owner_id": owner_id, "error": str(e)},
            ) from e

        found = []
        for question_id, data in zip(wanted, documents):
            if data is None:
                continue
            try:
                found.append(Question.model_validate(data))
            except ValidationError:
                logger.debug(f"Documento malformado ignorado: {question_id}")

        return found

    # -------------------------------------------------------------------------
    # Favoritos
    # -------------------------------------------------------------------------

    async def get_bookmarks(self, owner_id: str) -> list[str]:
        """Retorna IDs favoritados (vazio se o conjunto ainda nao existe)."""
        key = self._bookmarks_key(owner_id)
        try:
            data = await self.agentfs.kv.get(key)
        except Exception as e:
            raise StoreReadError(
                message="Falha ao ler favoritos",
                details={"owner_id": owner_id, "error": str(e)},
            ) from e

        if not isinstance(data, dict):
            return []
        return [i for i in data.get("ids", []) if isinstance(i, str)]

    async def toggle_bookmark(self, owner_id: str, question_id: str) -> bool:
        """Alterna o favorito de uma pergunta.

        A primeira chamada para um dono cria o conjunto contendo apenas
        o ID informado. Chamadas concorrentes para o mesmo dono sao
        serializadas.

        Returns:
            True se o ID agora esta no conjunto, False se foi removido

        Raises:
            StoreWriteError: Se a gravacao falhar
        """
        key = self._bookmarks_key(owner_id)

        async with self._bookmark_lock(owner_id):
            ids = await self.get_bookmarks(owner_id)

            if question_id in ids:
                ids = [i for i in ids if i != question_id]
                added = False
            else:
                ids.append(question_id)
                added = True

            try:
                await self.agentfs.kv.set(key, {"ids": ids})
            except Exception as e:
                raise StoreWriteError(
                    message="Falha ao gravar favorito",
                    details={"owner_id": owner_id, "question_id": question_id, "error": str(e)},
                ) from e

        logger.debug(f"Favorito {'adicionado' if added else 'removido'}: {owner_id}/{question_id}")
        return added

    async def reset_owner(self, owner_id: str) -> int:
        """Remove perguntas e favoritos do dono."""
        removed = await super().reset_owner(owner_id)
        key = self._bookmarks_key(owner_id)
        try:
            if await self.agentfs.kv.get(key) is not None:
                await self.agentfs.kv.delete(key)
        except Exception as e:
            raise StoreWriteError(
                message="Falha ao remover favoritos",
                details={"owner_id": owner_id, "error": str(e)},
            ) from e
        return removed
