"""
Base Generator Interface

Abstract interface for the text-generation collaborator.
Allows SwarmIQ to work with different generation backends (LLMs, functions, simulators).
"""

from abc import ABC, abstractmethod


class BaseGenerator(ABC):
    """
    Abstract base class for all text generators.

    Generators produce the free text behind every agent decision and every
    synthesis step. Different implementations can generate via:
    - LLMs (OpenAI, Anthropic)
    - Python callables
    - Deterministic templates (for testing)

    Implementations must raise AgentCallFailure on any failure so the
    engine can drop the affected agent instead of failing the task.
    """

    @abstractmethod
    def generate(self, prompt: str, temperature: float = 0.7, max_tokens: int = 500) -> str:
        """
        Generate text for a prompt.

        Args:
            prompt: Full prompt text
            temperature: Sampling temperature
            max_tokens: Upper bound on generated tokens

        Returns:
            Generated text

        Raises:
            AgentCallFailure: If the backend errors or times out
        """
        pass
