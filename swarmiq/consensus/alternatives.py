import logging
from typing import List, Optional
from swarmiq.core.config import ExecutorConfig, SwarmSettings
from swarmiq.core.exceptions import AgentCallFailure
from swarmiq.core.models import Decision
from swarmiq.consensus.prompts import ALTERNATIVES_PROMPT
from swarmiq.execution.base import BaseGenerator

logger = logging.getLogger(__name__)

MAX_ALTERNATIVES = 3


class AlternativeGenerator:
    """Secondary strategies drawn from minority (low-confidence) opinions."""

    def __init__(
        self,
        generator: BaseGenerator,
        settings: Optional[SwarmSettings] = None,
        executor_config: Optional[ExecutorConfig] = None
    ):
        self.generator = generator
        self.settings = settings or SwarmSettings()
        self.executor_config = executor_config or ExecutorConfig()

    def minority_opinions(self, decisions: List[Decision]) -> List[str]:
        return [
            " ".join(d.text.split())
            for d in decisions
            if d.confidence < self.settings.minority_threshold and d.text.strip()
        ]

    def generate_alternatives(self, decisions: List[Decision], consensus: str) -> List[str]:
        minority = self.minority_opinions(decisions)
        if not minority:
            return []

        count = max(1, min(self.settings.max_alternatives, MAX_ALTERNATIVES))
        prompt = ALTERNATIVES_PROMPT.format(
            count=count,
            opinions="\n\n".join(minority),
            consensus=consensus,
        )
        try:
            text = self.generator.generate(
                prompt,
                temperature=self.executor_config.alternatives_temperature,
                max_tokens=self.executor_config.alternatives_max_tokens,
            )
        except AgentCallFailure as e:
            logger.warning("Alternative generation failed, returning none: %s", e)
            return []

        lines = [line.strip() for line in (text or "").splitlines()]
        return [line for line in lines if line][:count]
