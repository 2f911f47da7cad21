# =============================================================================
# CONFTEST - Fixtures compartilhadas para todos os testes
# =============================================================================
# Centraliza mocks do AgentFS, perguntas de exemplo, provedor e gerador
# =============================================================================

from unittest.mock import AsyncMock, MagicMock

import pytest


# =============================================================================
# FIXTURES DO AGENTFS
# =============================================================================


def _make_dict_agentfs():
    """AgentFS com KV em dicionario (comportamento real de get/set/list)."""
    mock = MagicMock()
    _storage = {}

    async def mock_get(key):
        return _storage.get(key)

    async def mock_set(key, value):
        _storage[key] = value

    async def mock_delete(key):
        _storage.pop(key, None)

    async def mock_list(prefix=""):
        return [{"key": k} for k in list(_storage) if k.startswith(prefix)]

    mock.kv = AsyncMock()
    mock.kv.get = mock_get
    mock.kv.set = mock_set
    mock.kv.delete = mock_delete
    mock.kv.list = mock_list
    mock._storage = _storage

    mock.close = AsyncMock()

    return mock


@pytest.fixture
def mock_agentfs():
    """Mock do AgentFS com KV vazio (AsyncMock)."""
    mock = MagicMock()

    mock.kv = AsyncMock()
    mock.kv.get = AsyncMock(return_value=None)
    mock.kv.set = AsyncMock()
    mock.kv.delete = AsyncMock()
    mock.kv.list = AsyncMock(return_value=[])

    mock.close = AsyncMock()

    return mock


@pytest.fixture
def mock_agentfs_with_data():
    """AgentFS duravel com KV em memoria."""
    return _make_dict_agentfs()


@pytest.fixture
def local_agentfs():
    """AgentFS local (artefatos de sessao) com KV em memoria."""
    return _make_dict_agentfs()


@pytest.fixture
def failing_agentfs():
    """AgentFS cujo KV falha em todas as operacoes."""
    mock = MagicMock()
    error = ConnectionError("agentfs offline")

    mock.kv = AsyncMock()
    mock.kv.get = AsyncMock(side_effect=error)
    mock.kv.set = AsyncMock(side_effect=error)
    mock.kv.delete = AsyncMock(side_effect=error)
    mock.kv.list = AsyncMock(side_effect=error)

    mock.close = AsyncMock()

    return mock


# =============================================================================
# FIXTURES DE PERGUNTAS
# =============================================================================


@pytest.fixture
def sample_questions():
    """Tres perguntas: a primeira com resposta por letra, as outras literais."""
    from quizportal.models.schemas import Question

    return [
        Question(
            id="q-1",
            text="What is 2 + 2?",
            options=["3", "4", "5", "6"],
            correct_answer="B",
            topic="Math",
            subject="Arithmetic",
        ),
        Question(
            id="q-2",
            text="What is the capital of France?",
            options=["Berlin", "Paris", "Rome"],
            correct_answer="Paris",
            topic="Geography",
            subject="Europe",
        ),
        Question(
            id="q-3",
            text="What is H2O?",
            options=["Water", "Salt"],
            correct_answer="Water",
            topic="Chemistry",
            subject="Molecules",
        ),
    ]


@pytest.fixture
def raw_candidates():
    """Saida bruta do gerador com duplicadas e itens invalidos."""
    return [
        {"question": "What is 2 + 2?", "options": ["3", "4", "5", "6"], "correctAnswer": "B"},
        {"question": "  what IS 2 +  2? ", "options": ["1", "2", "3", "4"], "correctAnswer": "D"},
        {"question": "Largest planet?", "options": ["Mars", "Jupiter"], "correctAnswer": "Jupiter"},
        {"question": "", "options": ["a", "b"], "correctAnswer": "a"},
        {"question": "Only one option?", "options": ["x"], "correctAnswer": "x"},
        {"question": "Missing answer?", "options": ["x", "y"]},
        {"question": "Smallest prime?", "options": ["1", "2", "3"], "correctAnswer": "C"},
    ]


# =============================================================================
# FIXTURES DE IDENTIDADE
# =============================================================================


@pytest.fixture
def authenticated_identity():
    from quizportal.models.schemas import ProviderUser

    return ProviderUser(
        uid="user-abc",
        display_name="Ada Lovelace",
        email="ada@example.com",
    ).to_identity()


@pytest.fixture
def provider(authenticated_identity):
    """Provedor externo com login simulado retornando usuario fixo."""
    from quizportal.identity import ExternalIdentityProvider

    sign_in = AsyncMock(return_value=authenticated_identity)
    sign_out = AsyncMock()
    instance = ExternalIdentityProvider(sign_in_handler=sign_in, sign_out_handler=sign_out)
    instance.sign_in_handler_mock = sign_in
    instance.sign_out_handler_mock = sign_out
    return instance


@pytest.fixture
def artifacts(local_agentfs):
    from quizportal.identity import LocalArtifactStore

    return LocalArtifactStore(local_agentfs)


@pytest.fixture
def question_store(mock_agentfs_with_data):
    from quizportal.storage import QuestionStore

    return QuestionStore(mock_agentfs_with_data)


@pytest.fixture
def history_store(mock_agentfs_with_data):
    from quizportal.storage import HistoryStore

    return HistoryStore(mock_agentfs_with_data)


@pytest.fixture
def reconciler(provider, artifacts, question_store, history_store):
    from quizportal.identity import IdentityReconciler

    return IdentityReconciler(
        provider=provider,
        artifacts=artifacts,
        origin="quiz.test.local",
        guest_data_stores=(question_store, history_store),
    )


# =============================================================================
# FIXTURES DO GERADOR
# =============================================================================


@pytest.fixture
def fake_generator(raw_candidates):
    """Gerador mockado (mesma interface do ClaudeQuestionGenerator)."""
    mock = MagicMock()
    mock.generate = AsyncMock(return_value=raw_candidates)
    mock.explain_answer = AsyncMock(return_value="Because 2 + 2 equals 4.")
    mock.generate_study_plan = AsyncMock(return_value="1. Review. 2. Practice. 3. Repeat.")
    return mock


# =============================================================================
# FIXTURES DO CONTROLLER
# =============================================================================


@pytest.fixture
def test_config():
    """Config de teste: cronometro com intervalo longo (ticks manuais)."""
    from quizportal.config import QuizPortalConfig

    return QuizPortalConfig(
        tick_interval=3600.0,
        default_question_count=25,
        app_origin="quiz.test.local",
        environment="test",
    )


@pytest.fixture
def controller(mock_agentfs_with_data, local_agentfs, provider, fake_generator, test_config):
    """Controller completo sobre AgentFS em memoria."""
    import random

    from quizportal.controller import QuizPortalController

    instance = QuizPortalController.create(
        agentfs=mock_agentfs_with_data,
        local_agentfs=local_agentfs,
        provider=provider,
        generator=fake_generator,
        config=test_config,
    )
    instance._rng = random.Random(42)
    return instance


# =============================================================================
# FIXTURES DE LOGGING
# =============================================================================


@pytest.fixture
def capture_logs(caplog):
    """Captura logs para verificacao em testes."""
    import logging

    caplog.set_level(logging.DEBUG)
    return caplog
