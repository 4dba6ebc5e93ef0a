"""
Deterministic Generator - Reproducible generation backend for tests and offline runs.

Removes model randomness by answering each swarm phase with a fixed rule:
- agent decisions: one shared recommendation derived from the task line
- consensus synthesis: the first (highest-confidence) expert opinion
- alternatives: one line per minority opinion
"""

import re
from swarmiq.consensus.prompts import (
    ALTERNATIVES_INSTRUCTION,
    CONSENSUS_INSTRUCTION,
    DECISION_INSTRUCTION,
)
from swarmiq.execution.base import BaseGenerator

_EXPERT_HEADER = re.compile(r"^\w+ \(.*\) - Confidence: \d+%:$")


class DeterministicGenerator(BaseGenerator):
    """
    Deterministic text generator for testing and regression checks.

    Args:
        decision_template: Template for agent decisions; receives {task}.
        max_alternative_words: Words kept from each minority opinion.
    """

    def __init__(
        self,
        decision_template: str = (
            "Recommended approach for '{task}': acknowledge the request, "
            "address it directly and confirm the next steps in writing."
        ),
        max_alternative_words: int = 12,
    ):
        self.decision_template = decision_template
        self.max_alternative_words = max_alternative_words

    def generate(self, prompt: str, temperature: float = 0.7, max_tokens: int = 500) -> str:
        if prompt.startswith(CONSENSUS_INSTRUCTION):
            return self._first_expert_opinion(prompt)
        if prompt.startswith(ALTERNATIVES_INSTRUCTION.split("{")[0]):
            return self._alternatives(prompt)
        if DECISION_INSTRUCTION in prompt:
            return self.decision_template.format(task=self._task_line(prompt))
        lines = [line.strip() for line in prompt.splitlines() if line.strip()]
        return lines[-1] if lines else ""

    @staticmethod
    def _task_line(prompt: str) -> str:
        for line in prompt.splitlines():
            if line.strip().startswith("Task:"):
                return line.split("Task:", 1)[1].strip()
        return ""

    @staticmethod
    def _first_expert_opinion(prompt: str) -> str:
        lines = prompt.splitlines()
        for i, line in enumerate(lines):
            if _EXPERT_HEADER.match(line.strip()):
                body = []
                for follow in lines[i + 1:]:
                    if not follow.strip() or _EXPERT_HEADER.match(follow.strip()):
                        break
                    body.append(follow.strip())
                return " ".join(body)
        return ""

    def _alternatives(self, prompt: str) -> str:
        section = prompt.split("\n\n", 1)[1] if "\n\n" in prompt else ""
        section = section.split("Main consensus:", 1)[0]
        opinions = [block.strip() for block in section.split("\n\n") if block.strip()]
        lines = []
        for i, opinion in enumerate(opinions, start=1):
            words = opinion.split()[: self.max_alternative_words]
            lines.append(f"Alternative {i}: {' '.join(words)}")
        return "\n".join(lines)
