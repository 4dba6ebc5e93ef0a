"""
Function Generator - Generate agent text using Python callables

Allows any Python function to stand in for the text-generation backend.
Useful for rule-based systems, local models, and tests.
"""

import logging
import threading
from typing import Callable
from swarmiq.core.exceptions import AgentCallFailure, InvalidConfiguration
from swarmiq.execution.base import BaseGenerator

logger = logging.getLogger(__name__)


class FunctionGenerator(BaseGenerator):
    """
    Generate text by calling a function.

    The function receives (prompt, temperature, max_tokens) and must return
    a string. Any exception it raises is reported as AgentCallFailure.
    """

    def __init__(self, func: Callable[[str, float, int], str]):
        if not callable(func):
            raise InvalidConfiguration("FunctionGenerator requires a callable")
        self.func = func
        self.calls = 0
        self._calls_lock = threading.Lock()

    def generate(self, prompt: str, temperature: float = 0.7, max_tokens: int = 500) -> str:
        with self._calls_lock:
            self.calls += 1
        try:
            result = self.func(prompt, temperature, max_tokens)
        except AgentCallFailure:
            raise
        except Exception as e:
            logger.debug("Generator function raised: %s", e)
            raise AgentCallFailure(str(e)) from e

        if not isinstance(result, str):
            raise AgentCallFailure(f"Generator function returned {type(result).__name__}, expected str")
        return result
