# =============================================================================
# TESTES - Config Module
# =============================================================================
# Testes unitários para configuração centralizada
# =============================================================================

import os
from unittest.mock import patch


class TestQuizPortalConfigDefaults:
    """Testes para valores padrão."""

    def test_defaults(self):
        """Verifica valores padrão do dataclass."""
        from quizportal.config import QuizPortalConfig

        config = QuizPortalConfig()

        assert config.seconds_per_question == 60
        assert config.tick_interval == 1.0
        assert config.max_import_count == 100
        assert config.max_source_chars == 20000
        assert config.max_images == 10
        assert config.generation_model == "haiku"

    def test_to_dict_sections(self):
        """Verifica agrupamento por seção."""
        from quizportal.config import QuizPortalConfig

        data = QuizPortalConfig().to_dict()

        assert set(data) == {"storage", "generation", "quiz", "app"}
        assert data["quiz"]["seconds_per_question"] == 60
        assert data["storage"]["agentfs_id"] == "quizportal"


class TestQuizPortalConfigFromEnv:
    """Testes para leitura do ambiente."""

    def test_from_env_overrides(self):
        """Verifica que variáveis de ambiente sobrescrevem padrões."""
        from quizportal.config import QuizPortalConfig

        env = {
            "QUIZPORTAL_AGENTFS_ID": "custom",
            "QUIZPORTAL_MODEL": "SONNET",
            "QUIZ_SECONDS_PER_QUESTION": "30",
            "QUIZ_TICK_INTERVAL": "0.5",
            "LOG_LEVEL": "debug",
        }
        with patch.dict(os.environ, env):
            config = QuizPortalConfig.from_env()

        assert config.agentfs_id == "custom"
        assert config.generation_model == "sonnet"
        assert config.seconds_per_question == 30
        assert config.tick_interval == 0.5
        assert config.log_level == "DEBUG"

    def test_invalid_numbers_fall_back(self):
        """Verifica fallback para valores numéricos inválidos."""
        from quizportal.config import QuizPortalConfig

        env = {"QUIZ_SECONDS_PER_QUESTION": "abc", "QUIZ_TICK_INTERVAL": "fast"}
        with patch.dict(os.environ, env):
            config = QuizPortalConfig.from_env()

        assert config.seconds_per_question == 60
        assert config.tick_interval == 1.0

    def test_reload_config_rebuilds_singleton(self):
        """Verifica que reload_config relê o ambiente."""
        from quizportal.config import get_config, reload_config

        with patch.dict(os.environ, {"APP_ORIGIN": "first.example.com"}):
            reload_config()
            assert get_config().app_origin == "first.example.com"

        with patch.dict(os.environ, {"APP_ORIGIN": "second.example.com"}):
            assert get_config().app_origin == "first.example.com"
            reload_config()
            assert get_config().app_origin == "second.example.com"
