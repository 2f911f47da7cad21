"""Quiz Scoring Engine - Motor de pontuacao."""

import time
import uuid
from collections.abc import Callable, Mapping, Sequence

from ..models.schemas import Question, QuizResult, ResultDetail


def _now_ms() -> int:
    return int(time.time() * 1000)


def _new_result_id() -> str:
    return uuid.uuid4().hex[:12]


class QuizScoringEngine:
    """Motor de pontuação de tentativas.

    Toda comparação usa a resposta correta resolvida (texto da
    alternativa), nunca o campo bruto: uma pergunta gravada com letra
    ("B") e a mesma gravada com texto pontuam igual.

    Example:
        >>> engine = QuizScoringEngine()
        >>> result = engine.build_result("uid-1", "Physics", questions, {"q1": "5"})
        >>> result.score
        1
    """

    def __init__(
        self,
        clock: Callable[[], int] = _now_ms,
        id_factory: Callable[[], str] = _new_result_id,
    ):
        self._clock = clock
        self._id_factory = id_factory

    def evaluate_answer(self, question: Question, selected_option: str | None) -> ResultDetail:
        """Avalia a resposta de uma pergunta.

        Args:
            question: Pergunta respondida
            selected_option: Texto selecionado (None se não respondida)

        Returns:
            ResultDetail com is_correct e resposta correta resolvida
        """
        correct_text = question.resolved_correct_answer
        return ResultDetail(
            question_id=question.id,
            selected_option=selected_option,
            correct_answer_text=correct_text,
            is_correct=selected_option is not None and selected_option == correct_text,
        )

    def build_details(
        self, questions: Sequence[Question], answers: Mapping[str, str | None]
    ) -> list[ResultDetail]:
        """Avalia todas as perguntas na ordem original."""
        return [self.evaluate_answer(q, answers.get(q.id)) for q in questions]

    def build_result(
        self,
        owner_id: str,
        topic: str,
        questions: Sequence[Question],
        answers: Mapping[str, str | None],
    ) -> QuizResult:
        """Monta o resultado imutável da tentativa.

        Raises:
            ValueError: Se não houver perguntas
        """
        if not questions:
            raise ValueError("Tentativa sem perguntas não pode ser pontuada")

        details = self.build_details(questions, answers)
        return QuizResult(
            id=self._id_factory(),
            owner_id=owner_id,
            timestamp=self._clock(),
            score=sum(1 for d in details if d.is_correct),
            total_questions=len(questions),
            topic=topic,
            details=tuple(details),
        )
