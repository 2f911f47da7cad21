"""Local Artifacts - Blobs locais da sessao (convidado e cache de perguntas)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError

if TYPE_CHECKING:
    from agentfs_sdk import AgentFS

from ..exceptions import StoreWriteError
from ..models.schemas import Identity, Question

logger = logging.getLogger(__name__)


class LocalArtifactStore:
    """Artefatos locais, fora de qualquer sincronizacao entre dispositivos.

    Estrutura de chaves (AgentFS local):
        - local:guest_identity -> snapshot da identidade convidada
        - local:question_cache -> ultimo conjunto de perguntas lido
    """

    GUEST_KEY = "local:guest_identity"
    QUESTION_CACHE_KEY = "local:question_cache"

    def __init__(self, agentfs: AgentFS):
        self.agentfs = agentfs

    async def save_guest(self, identity: Identity) -> None:
        await self._set(self.GUEST_KEY, identity.model_dump(mode="json"))

    async def load_guest(self) -> Identity | None:
        data = await self.agentfs.kv.get(self.GUEST_KEY)
        if not data:
            return None
        try:
            identity = Identity.model_validate(data)
        except ValidationError:
            logger.debug("Snapshot de convidado invalido ignorado")
            return None
        return identity if identity.is_guest else None

    async def save_question_cache(self, owner_id: str, questions: list[Question]) -> None:
        await self._set(
            self.QUESTION_CACHE_KEY,
            {"owner_id": owner_id, "questions": [q.model_dump(mode="json") for q in questions]},
        )

    async def load_question_cache(self, owner_id: str) -> list[Question]:
        """Le cache local, apenas se pertencer ao dono informado."""
        data = await self.agentfs.kv.get(self.QUESTION_CACHE_KEY)
        if not isinstance(data, dict) or data.get("owner_id") != owner_id:
            return []

        questions = []
        for item in data.get("questions", []):
            try:
                questions.append(Question.model_validate(item))
            except ValidationError:
                continue
        return questions

    async def clear_all(self) -> None:
        """Remove os dois artefatos locais.

        Raises:
            StoreWriteError: Se a remocao falhar
        """
        for key in (self.GUEST_KEY, self.QUESTION_CACHE_KEY):
            try:
                if await self.agentfs.kv.get(key) is not None:
                    await self.agentfs.kv.delete(key)
            except Exception as e:
                raise StoreWriteError(
                    message=f"Falha ao limpar artefato local {key}",
                    details={"key": key, "error": str(e)},
                ) from e
        logger.debug("Artefatos locais limpos")

    async def _set(self, key: str, value: dict) -> None:
        try:
            await self.agentfs.kv.set(key, value)
        except Exception as e:
            raise StoreWriteError(
                message=f"Falha ao gravar artefato local {key}",
                details={"key": key, "error": str(e)},
            ) from e
