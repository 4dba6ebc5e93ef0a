"""Factory for the text-generation backend named in configuration."""

from swarmiq.core.config import ExecutorConfig
from swarmiq.core.exceptions import InvalidConfiguration
from swarmiq.execution.base import BaseGenerator
from swarmiq.execution.deterministic_executor import DeterministicGenerator
from swarmiq.execution.llm_executor import LLMGenerator

BACKENDS = ("deterministic", "llm")


def build_generator(config: ExecutorConfig) -> BaseGenerator:
    """Build the generator for config.backend.

    Args:
        config: Executor configuration; "llm" also reads model, keys,
                timeout and retry settings

    Returns:
        A ready-to-use generator

    Raises:
        InvalidConfiguration: If the backend name is unknown
    """
    backend = (config.backend or "").strip().lower()
    if backend == "deterministic":
        return DeterministicGenerator()
    if backend == "llm":
        return LLMGenerator(
            model=config.model,
            openai_api_key=config.openai_api_key,
            anthropic_api_key=config.anthropic_api_key,
            timeout=config.agent_timeout,
            max_retries=config.max_retries,
        )
    raise InvalidConfiguration(
        f"Unknown generator backend '{config.backend}'. Expected one of: {', '.join(BACKENDS)}"
    )
