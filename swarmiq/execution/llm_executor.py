"""
LLM Generator - Generate agent text using Large Language Models

Supports OpenAI (GPT-4, etc.) and Anthropic (Claude) as generation backends.
"""

import logging
from typing import Optional
from swarmiq.core.exceptions import AgentCallFailure, InvalidConfiguration
from swarmiq.execution.base import BaseGenerator

logger = logging.getLogger(__name__)


class LLMGenerator(BaseGenerator):
    """
    Generate text using LLM APIs.

    The model name selects the provider:
    - "gpt-4-turbo", "gpt-4o" (OpenAI)
    - "claude-3-opus", "claude-sonnet-4-..." (Anthropic)
    """

    SUPPORTED_PREFIXES = ("gpt", "o1", "o3", "claude")

    def __init__(
        self,
        model: str = "gpt-4-turbo",
        openai_api_key: Optional[str] = None,
        anthropic_api_key: Optional[str] = None,
        timeout: float = 30,
        max_retries: int = 2,
        system_prompt: str = "You are a specialized AI agent in a decision-making swarm."
    ):
        """
        Initialize LLM generator.

        Args:
            model: Model name; its prefix picks the provider
            openai_api_key: OpenAI API key
            anthropic_api_key: Anthropic API key
            timeout: Request timeout in seconds
            max_retries: Attempts per call before giving up
            system_prompt: System prompt sent with every call
        """
        if not model.startswith(self.SUPPORTED_PREFIXES):
            raise InvalidConfiguration(f"Unknown LLM model: {model}")

        self.model = model
        self.openai_api_key = openai_api_key
        self.anthropic_api_key = anthropic_api_key
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.system_prompt = system_prompt

        # Lazy clients so only the provider in use must be configured
        self.openai_client = None
        self.anthropic_client = None

    @property
    def provider(self) -> str:
        return "anthropic" if self.model.startswith("claude") else "openai"

    def _init_openai(self):
        """Initialize OpenAI client (lazy)."""
        if self.openai_client is None:
            if not self.openai_api_key:
                raise InvalidConfiguration("OpenAI API key required for OpenAI models")
            import openai
            self.openai_client = openai.OpenAI(api_key=self.openai_api_key, timeout=self.timeout)

    def _init_anthropic(self):
        """Initialize Anthropic client (lazy)."""
        if self.anthropic_client is None:
            if not self.anthropic_api_key:
                raise InvalidConfiguration("Anthropic API key required for Claude models")
            import anthropic
            self.anthropic_client = anthropic.Anthropic(api_key=self.anthropic_api_key, timeout=self.timeout)

    def generate(self, prompt: str, temperature: float = 0.7, max_tokens: int = 500) -> str:
        """
        Generate text, retrying up to max_retries times.

        Raises:
            AgentCallFailure: When every attempt failed
        """
        last_error = None
        for attempt in range(1, self.max_retries + 1):
            try:
                if self.provider == "anthropic":
                    return self._generate_anthropic(prompt, temperature, max_tokens)
                return self._generate_openai(prompt, temperature, max_tokens)
            except InvalidConfiguration:
                raise
            except Exception as e:
                last_error = e
                logger.warning(
                    "%s call failed (attempt %d/%d): %s",
                    self.model, attempt, self.max_retries, e
                )

        raise AgentCallFailure(f"{self.model} failed after {self.max_retries} attempts: {last_error}")

    def _generate_openai(self, prompt: str, temperature: float, max_tokens: int) -> str:
        """Generate using OpenAI API."""
        self._init_openai()

        response = self.openai_client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": self.system_prompt},
                {"role": "user", "content": prompt}
            ],
            temperature=temperature,
            max_tokens=max_tokens,
        )

        return response.choices[0].message.content or ""

    def _generate_anthropic(self, prompt: str, temperature: float, max_tokens: int) -> str:
        """Generate using Anthropic API."""
        self._init_anthropic()

        response = self.anthropic_client.messages.create(
            model=self.model,
            max_tokens=max_tokens,
            temperature=temperature,
            system=self.system_prompt,
            messages=[
                {"role": "user", "content": prompt}
            ],
        )

        return response.content[0].text if response.content else ""
