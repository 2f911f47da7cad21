"""Claude Question Generator - Adaptador de geracao sobre o Claude Agent SDK."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import AsyncIterator, Sequence
from typing import Any

from claude_agent_sdk import AssistantMessage, ClaudeAgentOptions, TextBlock, query

from ..exceptions import GenerationError
from ..models.enums import GenerationKind
from ..models.schemas import QuizResult
from ..prompts import (
    EXPLAIN_PROMPT,
    FILE_GENERATION_PROMPT,
    IMAGE_GENERATION_PROMPT,
    NO_ANSWER_LABEL,
    QUESTION_FORMAT,
    STUDY_PLAN_PROMPT,
    TEXT_GENERATION_PROMPT,
)
from .factory import LLMClientFactory

logger = logging.getLogger(__name__)

_DATA_URL_RE = re.compile(r"^data:(?P<media>[\w/+.-]+);base64,", re.IGNORECASE)
_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL)

STUDY_PLAN_WINDOW = 5


def extract_json_array(text: str) -> list[Any]:
    """Extrai o primeiro array JSON da resposta do modelo.

    Aceita blocos ```json ... ``` e texto antes/depois do array.

    Raises:
        GenerationError: Se nao houver array JSON valido
    """
    candidates = [m.group(1) for m in _FENCE_RE.finditer(text)] + [text]

    for candidate in candidates:
        start = candidate.find("[")
        end = candidate.rfind("]")
        if start == -1 or end <= start:
            continue
        try:
            data = json.loads(candidate[start : end + 1])
        except json.JSONDecodeError:
            continue
        if isinstance(data, list):
            return data

    raise GenerationError(
        message="A IA retornou JSON invalido.",
        details={"response_preview": text[:200]},
    )


def split_data_url(image: str) -> tuple[str, str]:
    """Separa 'data:<media>;base64,<dados>' em (media_type, dados)."""
    match = _DATA_URL_RE.match(image)
    if match:
        return match.group("media").lower(), image[match.end() :]
    return "image/jpeg", image


class ClaudeQuestionGenerator:
    """Gera perguntas, explicacoes e planos de estudo via Claude.

    Example:
        >>> generator = ClaudeQuestionGenerator(LLMClientFactory("haiku"))
        >>> raw = await generator.generate(GenerationKind.TEXT, None, "Physics", "Optics", 5)
        >>> len(raw)
        5
    """

    def __init__(
        self,
        factory: LLMClientFactory | None = None,
        max_source_chars: int = 20000,
        max_images: int = 10,
    ):
        self.factory = factory or LLMClientFactory()
        self.max_source_chars = max_source_chars
        self.max_images = max_images

    # -------------------------------------------------------------------------
    # Geracao
    # -------------------------------------------------------------------------

    async def generate(
        self,
        kind: GenerationKind,
        payload: Any,
        subject: str,
        topic: str,
        count: int,
    ) -> list[dict[str, Any]]:
        """Gera candidatos brutos (nao validados).

        Args:
            kind: TEXT, IMAGE ou FILE
            payload: None (texto), lista de imagens base64 ou conteudo do arquivo
            subject: Materia
            topic: Topico
            count: Quantidade pedida ao modelo

        Returns:
            Itens do array JSON retornado pelo modelo

        Raises:
            GenerationError: Falha do SDK, payload invalido ou resposta sem JSON
        """
        question_format = QUESTION_FORMAT.format(topic=topic, subject=subject)

        if kind == GenerationKind.TEXT:
            prompt: str | AsyncIterator[dict[str, Any]] = TEXT_GENERATION_PROMPT.format(
                count=count, subject=subject, topic=topic, format=question_format
            )
        elif kind == GenerationKind.FILE:
            if not payload:
                raise GenerationError(message="Conteudo do arquivo vazio")
            prompt = FILE_GENERATION_PROMPT.format(
                content=str(payload)[: self.max_source_chars],
                count=count,
                format=question_format,
            )
        elif kind == GenerationKind.IMAGE:
            images = list(payload or [])[: self.max_images]
            if not images:
                raise GenerationError(message="Nenhuma imagem enviada")
            text = IMAGE_GENERATION_PROMPT.format(count=count, format=question_format)
            prompt = self._image_prompt(images, text)
        else:
            raise GenerationError(message=f"Tipo de geracao nao suportado: {kind}")

        logger.info(f"Gerando {count} perguntas ({kind.value}) para {subject}/{topic}")
        response = await self._run(prompt, self.factory.generation_options())

        items = extract_json_array(response)
        logger.debug(f"Modelo retornou {len(items)} itens")
        return [item for item in items if isinstance(item, dict)]

    @staticmethod
    async def _image_prompt(images: Sequence[str], text: str) -> AsyncIterator[dict[str, Any]]:
        content: list[dict[str, Any]] = []
        for image in images:
            media_type, data = split_data_url(image)
            content.append(
                {
                    "type": "image",
                    "source": {"type": "base64", "media_type": media_type, "data": data},
                }
            )
        content.append({"type": "text", "text": text})

        yield {
            "type": "user",
            "message": {"role": "user", "content": content},
            "parent_tool_use_id": None,
            "session_id": "default",
        }

    # -------------------------------------------------------------------------
    # Tutor
    # -------------------------------------------------------------------------

    async def explain_answer(self, question: str, selected: str | None, correct: str) -> str:
        """Explica a resposta correta em poucas frases."""
        prompt = EXPLAIN_PROMPT.format(
            question=question,
            selected=selected or NO_ANSWER_LABEL,
            correct=correct,
        )
        return (await self._run(prompt, self.factory.tutor_options())).strip()

    async def generate_study_plan(self, history: Sequence[QuizResult]) -> str:
        """Plano de estudo a partir dos ultimos resultados."""
        recent = list(history)[-STUDY_PLAN_WINDOW:]
        summary = "\n".join(
            f"Topic: {r.topic} | Score: {r.score}/{r.total_questions}" for r in recent
        )
        prompt = STUDY_PLAN_PROMPT.format(summary=summary)
        return (await self._run(prompt, self.factory.tutor_options())).strip()

    # -------------------------------------------------------------------------
    # SDK
    # -------------------------------------------------------------------------

    async def _run(
        self,
        prompt: str | AsyncIterator[dict[str, Any]],
        options: ClaudeAgentOptions,
    ) -> str:
        """Executa a consulta e concatena os blocos de texto da resposta."""
        text = ""
        try:
            async for message in query(prompt=prompt, options=options):
                if isinstance(message, AssistantMessage):
                    for block in message.content:
                        if isinstance(block, TextBlock):
                            text += block.text
        except GenerationError:
            raise
        except Exception as e:
            logger.error(f"Falha na chamada ao modelo: {e}")
            raise GenerationError(
                message=f"Falha na geracao: {e}",
                details={"error_type": type(e).__name__},
            ) from e

        if not text.strip():
            raise GenerationError(message="O modelo retornou resposta vazia")
        return text
