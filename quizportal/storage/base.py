"""Base de stores particionados por dono sobre o KV do AgentFS."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from agentfs_sdk import AgentFS

from ..exceptions import StoreReadError, StoreWriteError
from ..utils.validators import validate_owner_id

logger = logging.getLogger(__name__)


def _entry_key(entry: Any) -> str:
    """Extrai chave de uma entrada retornada por kv.list."""
    if isinstance(entry, dict):
        return entry.get("key", "")
    return getattr(entry, "key", None) or str(entry)


class OwnerScopedStore:
    """Colecao de documentos por dono no KV do AgentFS.

    Estrutura de chaves:
        - users:{owner_id}:{COLLECTION}:{doc_id} -> documento JSON

    Cada chave e um documento independente (atomicidade por documento).
    """

    KEY_PREFIX = "users"
    COLLECTION = ""

    def __init__(self, agentfs: AgentFS):
        self.agentfs = agentfs

    def _owner_prefix(self, owner_id: str) -> str:
        return f"{self.KEY_PREFIX}:{validate_owner_id(owner_id)}:"

    def _collection_prefix(self, owner_id: str) -> str:
        return f"{self._owner_prefix(owner_id)}{self.COLLECTION}:"

    def _document_key(self, owner_id: str, doc_id: str) -> str:
        return f"{self._collection_prefix(owner_id)}{doc_id}"

    async def _list_keys(self, prefix: str) -> list[str]:
        try:
            entries = await self.agentfs.kv.list(prefix=prefix)
        except Exception as e:
            raise StoreReadError(
                message=f"Falha ao listar {prefix}",
                details={"prefix": prefix, "error": str(e)},
            ) from e

        keys = [_entry_key(entry) for entry in entries or []]
        return [key for key in keys if key.startswith(prefix)]

    async def _read_documents(self, prefix: str) -> list[tuple[str, Any]]:
        """Le todos os documentos sob o prefixo.

        Raises:
            StoreReadError: Se a listagem ou alguma leitura falhar
        """
        keys = await self._list_keys(prefix)
        documents = []
        for key in keys:
            try:
                data = await self.agentfs.kv.get(key)
            except Exception as e:
                raise StoreReadError(
                    message=f"Falha ao ler {key}",
                    details={"key": key, "error": str(e)},
                ) from e
            documents.append((key, data))
        return documents

    async def _delete_prefix(self, prefix: str) -> int:
        keys = await self._list_keys(prefix)
        for key in keys:
            try:
                await self.agentfs.kv.delete(key)
            except Exception as e:
                raise StoreWriteError(
                    message=f"Falha ao remover {key}",
                    details={"key": key, "error": str(e)},
                ) from e
        return len(keys)

    async def reset_owner(self, owner_id: str) -> int:
        """Remove todos os documentos da colecao para o dono.

        Returns:
            Numero de documentos removidos
        """
        removed = await self._delete_prefix(self._collection_prefix(owner_id))
        logger.info(f"{self.COLLECTION}: {removed} documentos removidos de {owner_id}")
        return removed
