"""QuizPortal Config - Configuracao centralizada via variaveis de ambiente."""

import os
from dataclasses import asdict, dataclass
from typing import Any


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


@dataclass
class QuizPortalConfig:
    """Configuracao da aplicacao.

    Attributes:
        agentfs_id: ID do AgentFS duravel (perguntas, favoritos, historico)
        local_agentfs_id: ID do AgentFS local (artefatos de sessao)
        generation_model: Modelo Claude usado na geracao (haiku, sonnet, opus)
        seconds_per_question: Segundos de prova por pergunta
        tick_interval: Intervalo real (s) entre ticks do cronometro
        default_question_count: Quantidade padrao de perguntas por quiz
        max_import_count: Maximo de perguntas por importacao
        max_source_chars: Limite de caracteres do conteudo de arquivo
        max_images: Maximo de imagens por importacao
        app_origin: Origem reportada em erros de dominio nao autorizado
        log_level: Nivel de log
        environment: development, test ou production
    """

    agentfs_id: str = "quizportal"
    local_agentfs_id: str = "quizportal-local"
    generation_model: str = "haiku"
    seconds_per_question: int = 60
    tick_interval: float = 1.0
    default_question_count: int = 25
    max_import_count: int = 100
    max_source_chars: int = 20000
    max_images: int = 10
    app_origin: str = "localhost"
    log_level: str = "INFO"
    environment: str = "development"

    @classmethod
    def from_env(cls) -> "QuizPortalConfig":
        """Cria configuracao a partir das variaveis de ambiente."""
        defaults = cls()
        return cls(
            agentfs_id=os.getenv("QUIZPORTAL_AGENTFS_ID", defaults.agentfs_id),
            local_agentfs_id=os.getenv(
                "QUIZPORTAL_LOCAL_AGENTFS_ID", defaults.local_agentfs_id
            ),
            generation_model=os.getenv("QUIZPORTAL_MODEL", defaults.generation_model).lower(),
            seconds_per_question=_env_int(
                "QUIZ_SECONDS_PER_QUESTION", defaults.seconds_per_question
            ),
            tick_interval=_env_float("QUIZ_TICK_INTERVAL", defaults.tick_interval),
            default_question_count=_env_int(
                "QUIZ_DEFAULT_COUNT", defaults.default_question_count
            ),
            max_import_count=_env_int("IMPORT_MAX_COUNT", defaults.max_import_count),
            max_source_chars=_env_int("IMPORT_MAX_SOURCE_CHARS", defaults.max_source_chars),
            max_images=_env_int("IMPORT_MAX_IMAGES", defaults.max_images),
            app_origin=os.getenv("APP_ORIGIN", defaults.app_origin),
            log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
            environment=os.getenv("ENVIRONMENT", defaults.environment),
        )

    def to_dict(self) -> dict[str, Any]:
        """Converte para dicionario agrupado por secao."""
        data = asdict(self)
        return {
            "storage": {
                "agentfs_id": data["agentfs_id"],
                "local_agentfs_id": data["local_agentfs_id"],
            },
            "generation": {
                "model": data["generation_model"],
                "max_import_count": data["max_import_count"],
                "max_source_chars": data["max_source_chars"],
                "max_images": data["max_images"],
            },
            "quiz": {
                "seconds_per_question": data["seconds_per_question"],
                "tick_interval": data["tick_interval"],
                "default_question_count": data["default_question_count"],
            },
            "app": {
                "origin": data["app_origin"],
                "log_level": data["log_level"],
                "environment": data["environment"],
            },
        }


_config: QuizPortalConfig | None = None


def get_config() -> QuizPortalConfig:
    """Retorna configuracao singleton (lida do ambiente na primeira chamada)."""
    global _config
    if _config is None:
        _config = QuizPortalConfig.from_env()
    return _config


def reload_config() -> QuizPortalConfig:
    """Recarrega configuracao do ambiente."""
    global _config
    _config = QuizPortalConfig.from_env()
    return _config
