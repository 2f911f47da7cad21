"""Question Deduplication Engine - Motor de deduplicacao de perguntas."""

import logging
from collections.abc import Iterable, Sequence

from ..models.normalization import normalize_text
from ..models.schemas import QuestionDraft

logger = logging.getLogger(__name__)


class QuestionDeduplicationEngine:
    """Motor de deduplicação de perguntas por texto normalizado.

    Duas perguntas são duplicadas quando o enunciado é igual ignorando
    maiúsculas/minúsculas e espaços. Paráfrases continuam distintas.

    Example:
        >>> engine = QuestionDeduplicationEngine()
        >>> engine.is_duplicate("  What is  2+2? ", {"what is 2+2?"})
        True
    """

    def extract_key(self, question_text: str) -> str:
        """Gera chave de deduplicação do enunciado."""
        return normalize_text(question_text)

    def is_duplicate(self, question_text: str, seen_keys: set[str]) -> bool:
        """Verifica se o enunciado já foi visto.

        Args:
            question_text: Texto da nova pergunta
            seen_keys: Chaves já utilizadas

        Returns:
            True se duplicada
        """
        key = self.extract_key(question_text)
        is_dup = key in seen_keys

        if is_dup:
            logger.debug(f"Pergunta duplicada detectada: '{key[:60]}'")

        return is_dup

    def dedupe(
        self,
        candidates: Sequence[QuestionDraft],
        existing_texts: Iterable[str] = (),
    ) -> list[QuestionDraft]:
        """Remove duplicadas mantendo a primeira ocorrência.

        Args:
            candidates: Perguntas na ordem gerada
            existing_texts: Enunciados que também contam como já vistos

        Returns:
            Perguntas únicas, na ordem original
        """
        seen = {self.extract_key(text) for text in existing_texts}
        unique = []

        for candidate in candidates:
            if self.is_duplicate(candidate.text, seen):
                continue
            seen.add(self.extract_key(candidate.text))
            unique.append(candidate)

        return unique
