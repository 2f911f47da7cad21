# =============================================================================
# CONFTEST - Pytest Fixtures Globais
# =============================================================================
# Garante import de quizportal/server sem instalacao e isola o ambiente
# =============================================================================

import os
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

# Adicionar root ao path
sys.path.insert(0, str(Path(__file__).parent))


# =============================================================================
# FIXTURES DE AMBIENTE
# =============================================================================


@pytest.fixture(autouse=True)
def setup_test_env():
    """Configura variaveis de ambiente e recarrega a configuracao."""
    from quizportal.config import reload_config

    env_vars = {
        "ENVIRONMENT": "test",
        "LOG_LEVEL": "ERROR",
        "ANTHROPIC_API_KEY": "test-key-123",
        "APP_ORIGIN": "quiz.test.local",
    }
    with patch.dict(os.environ, env_vars):
        reload_config()
        yield
    reload_config()
