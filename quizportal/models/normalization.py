"""Normalizacao de texto e de resposta correta."""

import re
import string

_WHITESPACE = re.compile(r"\s+")

# Letras aceitas como referencia a alternativa (A=0, B=1, ...)
ANSWER_LETTERS = string.ascii_uppercase[:4]


def normalize_text(text: str) -> str:
    """Normaliza texto para comparacao (case e espacos)."""
    return _WHITESPACE.sub(" ", text).strip().casefold()


def resolve_correct_answer(options: list[str], correct_answer: str) -> str:
    """Resolve a resposta correta para o texto literal da alternativa.

    A resposta pode estar gravada como texto literal ou como uma letra
    (A-D) indicando o indice da alternativa. Letras fora do numero de
    alternativas sao tratadas como texto literal.

    Args:
        options: Alternativas na ordem de exibicao
        correct_answer: Campo bruto armazenado

    Returns:
        Texto da alternativa correta

    Example:
        >>> resolve_correct_answer(["4", "5"], "B")
        '5'
        >>> resolve_correct_answer(["4", "5"], "4")
        '4'
    """
    answer = correct_answer.strip()

    if len(answer) == 1 and answer.upper() in ANSWER_LETTERS:
        index = ANSWER_LETTERS.index(answer.upper())
        if index < len(options):
            return options[index]

    return answer
