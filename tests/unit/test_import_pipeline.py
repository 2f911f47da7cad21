# =============================================================================
# TESTES - Question Import Pipeline
# =============================================================================
# Testes unitários para geração -> validação -> dedup -> gravação
# =============================================================================

from unittest.mock import AsyncMock

import pytest


def _request(count=5, **kwargs):
    from quizportal.models.schemas import ImportRequest

    return ImportRequest(subject="Science", topic="General", count=count, **kwargs)


class TestValidateCandidates:
    """Testes para validação dos candidatos brutos."""

    def test_invalid_items_dropped(self, fake_generator, question_store, raw_candidates):
        """Verifica descarte de vazios, alternativa única e sem resposta."""
        from quizportal.engine import QuestionImportPipeline

        pipeline = QuestionImportPipeline(fake_generator, question_store)

        drafts = pipeline.validate_candidates(raw_candidates, "Science", "General")

        assert len(drafts) == 4
        assert all(d.subject == "Science" and d.topic == "General" for d in drafts)

    def test_generator_topic_wins(self, fake_generator, question_store):
        """Verifica que tópico vindo do gerador é preservado."""
        from quizportal.engine import QuestionImportPipeline

        pipeline = QuestionImportPipeline(fake_generator, question_store)
        raw = [{"question": "Q?", "options": ["a", "b"], "correctAnswer": "a", "topic": "Optics"}]

        drafts = pipeline.validate_candidates(raw, "Physics", "General")

        assert drafts[0].topic == "Optics"
        assert drafts[0].subject == "Physics"


class TestPipelineRun:
    """Testes para a execução completa."""

    @pytest.mark.asyncio
    async def test_unique_valid_questions_inserted(self, fake_generator, question_store):
        """Verifica que só perguntas válidas e únicas são gravadas."""
        from quizportal.engine import QuestionImportPipeline

        pipeline = QuestionImportPipeline(fake_generator, question_store)

        report = await pipeline.run("user-1", _request(count=5))
        stored = await question_store.list_all("user-1")

        assert report.generated == 7
        assert report.valid == 4
        assert report.unique == 3
        assert report.inserted == 3
        assert sorted(q.text for q in stored) == [
            "Largest planet?",
            "Smallest prime?",
            "What is 2 + 2?",
        ]

    @pytest.mark.asyncio
    async def test_generator_receives_request(self, fake_generator, question_store):
        """Verifica repasse de tipo, matéria, tópico e quantidade."""
        from quizportal.engine import QuestionImportPipeline
        from quizportal.models.enums import GenerationKind

        pipeline = QuestionImportPipeline(fake_generator, question_store)

        await pipeline.run("user-1", _request(count=3))

        fake_generator.generate.assert_awaited_once_with(
            kind=GenerationKind.TEXT,
            payload=None,
            subject="Science",
            topic="General",
            count=3,
        )

    @pytest.mark.asyncio
    async def test_truncates_to_requested_count(self, fake_generator, question_store):
        """Verifica truncamento na quantidade solicitada."""
        from quizportal.engine import QuestionImportPipeline

        pipeline = QuestionImportPipeline(fake_generator, question_store)

        report = await pipeline.run("user-1", _request(count=2))

        assert report.inserted == 2
        assert [q.text for q in report.questions] == ["What is 2 + 2?", "Largest planet?"]

    @pytest.mark.asyncio
    async def test_max_count_caps_request(self, fake_generator, question_store):
        """Verifica limite máximo configurado."""
        from quizportal.engine import QuestionImportPipeline

        pipeline = QuestionImportPipeline(fake_generator, question_store, max_count=1)

        report = await pipeline.run("user-1", _request(count=50))

        assert fake_generator.generate.await_args.kwargs["count"] == 1
        assert report.requested == 50
        assert report.inserted == 1

    @pytest.mark.asyncio
    async def test_no_unique_candidates_writes_nothing(
        self, fake_generator, question_store, mock_agentfs_with_data
    ):
        """Verifica que lote sem candidatos válidos aborta sem gravar."""
        from quizportal.engine import QuestionImportPipeline
        from quizportal.exceptions import NoUniqueCandidatesError

        fake_generator.generate = AsyncMock(
            return_value=[{"question": "", "options": []}, {"options": ["a", "b"]}]
        )
        pipeline = QuestionImportPipeline(fake_generator, question_store)

        with pytest.raises(NoUniqueCandidatesError) as exc:
            await pipeline.run("user-1", _request())

        assert exc.value.details == {"generated": 2, "valid": 0}
        assert mock_agentfs_with_data._storage == {}

    @pytest.mark.asyncio
    async def test_generation_error_propagates(self, fake_generator, question_store):
        """Verifica que falha do gerador sobe sem alteração."""
        from quizportal.engine import QuestionImportPipeline
        from quizportal.exceptions import GenerationError

        fake_generator.generate = AsyncMock(side_effect=GenerationError(message="quota"))
        question_store.bulk_insert = AsyncMock()
        pipeline = QuestionImportPipeline(fake_generator, question_store)

        with pytest.raises(GenerationError, match="quota"):
            await pipeline.run("user-1", _request())

        question_store.bulk_insert.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_before_insert_can_abort(self, fake_generator, question_store):
        """Verifica que a checagem antes da gravação impede o bulk_insert."""
        from quizportal.engine import QuestionImportPipeline
        from quizportal.exceptions import NoIdentityError

        question_store.bulk_insert = AsyncMock()
        pipeline = QuestionImportPipeline(fake_generator, question_store)

        def identity_changed():
            raise NoIdentityError(message="Identidade alterada durante a operacao")

        with pytest.raises(NoIdentityError):
            await pipeline.run("user-1", _request(), before_insert=identity_changed)

        question_store.bulk_insert.assert_not_awaited()
