"""LLM Client Factory - Criacao de ClaudeAgentOptions por finalidade."""

from claude_agent_sdk import ClaudeAgentOptions

from ..prompts import GENERATION_SYSTEM_PROMPT, TUTOR_SYSTEM_PROMPT


class LLMClientFactory:
    """Factory de ClaudeAgentOptions para o QuizPortal.

    Centraliza:
    - System prompt por finalidade (geracao vs. tutor)
    - Selecao de modelo (haiku por padrao, configuravel)
    - Sem ferramentas: as chamadas sao texto -> texto

    Example:
        >>> factory = LLMClientFactory(model="haiku")
        >>> options = factory.generation_options()
        >>> async for message in query(prompt=prompt, options=options): ...
    """

    DEFAULT_MODEL = "haiku"  # Rapido e economico

    def __init__(self, model: str | None = None):
        self.model = model or self.DEFAULT_MODEL

    def create_options(self, system_prompt: str, model: str | None = None) -> ClaudeAgentOptions:
        """Cria ClaudeAgentOptions generico.

        Args:
            system_prompt: Prompt de sistema
            model: Modelo Claude (padrao: modelo da factory)

        Returns:
            ClaudeAgentOptions sem ferramentas, um unico turno
        """
        return ClaudeAgentOptions(
            model=model or self.model,
            system_prompt=system_prompt,
            allowed_tools=[],
            max_turns=1,
        )

    def generation_options(self) -> ClaudeAgentOptions:
        """Opcoes para geracao de perguntas (saida JSON)."""
        return self.create_options(GENERATION_SYSTEM_PROMPT)

    def tutor_options(self) -> ClaudeAgentOptions:
        """Opcoes para explicacoes e plano de estudo."""
        return self.create_options(TUTOR_SYSTEM_PROMPT)
