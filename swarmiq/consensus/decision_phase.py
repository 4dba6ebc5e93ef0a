"""
Parallel Decision Phase

Every selected agent answers the same task independently. No agent sees
another's output. Agents whose backend call fails or stalls are dropped
from the task rather than failing it.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import List, Optional
from swarmiq.core.config import ExecutorConfig
from swarmiq.core.exceptions import AgentCallFailure
from swarmiq.core.models import Agent, Decision, Task
from swarmiq.consensus.prompts import AGENT_DECISION_PROMPT
from swarmiq.execution.base import BaseGenerator
from swarmiq.execution.worker_pool import run_parallel

logger = logging.getLogger(__name__)


@dataclass
class DecisionPhaseResult:
    decisions: List[Decision]
    failed_agents: List[str] = field(default_factory=list)


def build_agent_prompt(agent: Agent, task: Task) -> str:
    return AGENT_DECISION_PROMPT.format(
        role=agent.role.value,
        specializations=", ".join(agent.specializations),
        description=task.description,
        context=json.dumps(task.context, indent=2, default=str, sort_keys=True),
    )


class ParallelDecisionPhase:
    def __init__(self, generator: BaseGenerator, config: Optional[ExecutorConfig] = None):
        self.generator = generator
        self.config = config or ExecutorConfig()

    def _run_agent(self, agent: Agent, task: Task) -> Decision:
        # Confidence is captured before the call so a concurrent update can't leak in mid-decision
        confidence = agent.confidence
        text = self.generator.generate(
            build_agent_prompt(agent, task),
            temperature=self.config.decision_temperature,
            max_tokens=self.config.decision_max_tokens,
        )
        if not text or not text.strip():
            raise AgentCallFailure("empty response", agent_id=agent.id)

        return Decision(
            agent_id=agent.id,
            role=agent.role,
            specializations=list(agent.specializations),
            response=text.strip(),
            reasoning=text.strip(),
            confidence=confidence,
        )

    def produce_decisions(self, task: Task, agents: List[Agent]) -> DecisionPhaseResult:
        """
        Collect one decision per agent, concurrently.

        Returns:
            DecisionPhaseResult with surviving decisions (input order) and
            the ids of agents dropped for this task
        """
        outcomes = run_parallel(
            lambda agent: self._run_agent(agent, task),
            agents,
            max_workers=self.config.max_workers,
            timeout=self.config.agent_timeout,
        )

        decisions, failed = [], []
        for outcome in outcomes:
            if outcome.ok:
                decisions.append(outcome.value)
            else:
                failed.append(outcome.item.id)
                logger.warning("Agent %s dropped from task %s: %s", outcome.item.id, task.id, outcome.error)

        logger.debug("Task %s: %d decisions, %d dropped", task.id, len(decisions), len(failed))
        return DecisionPhaseResult(decisions=decisions, failed_agents=failed)
