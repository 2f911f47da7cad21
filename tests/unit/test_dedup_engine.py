# =============================================================================
# TESTES - Question Deduplication Engine
# =============================================================================
# Testes unitários para deduplicação por texto normalizado
# =============================================================================


def _draft(text, options=("a", "b")):
    from quizportal.models.schemas import QuestionDraft

    return QuestionDraft(text=text, options=list(options), correct_answer="A")


class TestQuestionDeduplicationEngine:
    """Testes para detecção de duplicadas."""

    def test_extract_key(self):
        """Verifica chave normalizada."""
        from quizportal.engine import QuestionDeduplicationEngine

        engine = QuestionDeduplicationEngine()

        assert engine.extract_key("  What   is  2+2? ") == "what is 2+2?"

    def test_is_duplicate_case_and_whitespace(self):
        """Verifica duplicada por variação de caixa e espaços."""
        from quizportal.engine import QuestionDeduplicationEngine

        engine = QuestionDeduplicationEngine()

        assert engine.is_duplicate("WHAT is 2+2?", {"what is 2+2?"}) is True
        assert engine.is_duplicate("What is 3+3?", {"what is 2+2?"}) is False

    def test_dedupe_keeps_first(self):
        """Verifica que a primeira ocorrência vence."""
        from quizportal.engine import QuestionDeduplicationEngine

        engine = QuestionDeduplicationEngine()
        first = _draft("What is 2+2?", ("3", "4"))
        later = _draft("what is  2+2?", ("5", "6"))
        other = _draft("Capital of Peru?")

        unique = engine.dedupe([first, later, other])

        assert unique == [first, other]

    def test_paraphrases_are_distinct(self):
        """Verifica que paráfrases não são consideradas duplicadas."""
        from quizportal.engine import QuestionDeduplicationEngine

        engine = QuestionDeduplicationEngine()

        unique = engine.dedupe([_draft("What is 2+2?"), _draft("How much is 2+2?")])

        assert len(unique) == 2

    def test_existing_texts_count_as_seen(self):
        """Verifica enunciados pré-existentes."""
        from quizportal.engine import QuestionDeduplicationEngine

        engine = QuestionDeduplicationEngine()

        unique = engine.dedupe([_draft("Old one?"), _draft("New one?")], existing_texts=["old ONE?"])

        assert [d.text for d in unique] == ["New one?"]
