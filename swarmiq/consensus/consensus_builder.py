"""
Consensus Builder - Confidence-weighted aggregation

1. Keep the top ceil(60%) of validated decisions by confidence (noise filter)
2. Synthesize one recommendation from that majority via the generator
3. Aggregate confidence = mean over ALL decisions; minority dissent damps it
4. Tally votes per (role, primary specialization)

If synthesis fails or returns nothing usable, the highest-confidence
decision's text becomes the consensus and the result is marked degraded.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional
from swarmiq.core.config import ExecutorConfig, SwarmSettings
from swarmiq.core.exceptions import AgentCallFailure, MalformedSynthesisOutput
from swarmiq.core.models import Decision, VoteTally
from swarmiq.consensus.prompts import CONSENSUS_EXPERT_ENTRY, CONSENSUS_PROMPT
from swarmiq.execution.base import BaseGenerator

logger = logging.getLogger(__name__)


@dataclass
class ConsensusOutcome:
    consensus: str
    confidence: float
    reasoning: str
    voting_results: List[VoteTally] = field(default_factory=list)
    degraded: bool = False


def rank_by_confidence(decisions: List[Decision]) -> List[Decision]:
    return sorted(decisions, key=lambda d: (-d.confidence, d.agent_id))


def calculate_voting(decisions: List[Decision]) -> List[VoteTally]:
    groups: Dict[str, List[Decision]] = {}
    for decision in decisions:
        key = f"{decision.role.value}-{decision.primary_specialization}"
        groups.setdefault(key, []).append(decision)

    tallies = [
        VoteTally(option=option, vote_count=len(members), weight=sum(d.confidence for d in members))
        for option, members in groups.items()
    ]
    return sorted(tallies, key=lambda t: (-t.weight, t.option))


class ConsensusBuilder:
    def __init__(
        self,
        generator: BaseGenerator,
        settings: Optional[SwarmSettings] = None,
        executor_config: Optional[ExecutorConfig] = None
    ):
        self.generator = generator
        self.settings = settings or SwarmSettings()
        self.executor_config = executor_config or ExecutorConfig()

    def majority(self, decisions: List[Decision]) -> List[Decision]:
        keep = math.ceil(len(decisions) * self.settings.majority_fraction)
        return rank_by_confidence(decisions)[:keep]

    def build_prompt(self, majority: List[Decision]) -> str:
        experts = "\n\n".join(
            CONSENSUS_EXPERT_ENTRY.format(
                role=d.role.value,
                specializations=", ".join(d.specializations),
                confidence=d.confidence * 100,
                text=d.text,
            )
            for d in majority
        )
        return CONSENSUS_PROMPT.format(experts=experts)

    def synthesize(self, majority: List[Decision]) -> str:
        """
        Raises:
            MalformedSynthesisOutput: If the backend fails or returns blank text
        """
        try:
            text = self.generator.generate(
                self.build_prompt(majority),
                temperature=self.executor_config.consensus_temperature,
                max_tokens=self.executor_config.consensus_max_tokens,
            )
        except AgentCallFailure as e:
            raise MalformedSynthesisOutput(f"consensus synthesis call failed: {e}") from e

        if not isinstance(text, str) or not text.strip():
            raise MalformedSynthesisOutput("consensus synthesis returned no text")
        return text.strip()

    def build_consensus(self, decisions: List[Decision]) -> ConsensusOutcome:
        if not decisions:
            return ConsensusOutcome(consensus="", confidence=0.0, reasoning="No agent decisions to aggregate.")

        majority = self.majority(decisions)
        degraded = False
        try:
            consensus = self.synthesize(majority)
        except MalformedSynthesisOutput as e:
            logger.warning("Falling back to best single decision: %s", e)
            consensus = majority[0].text
            degraded = True

        confidence = min(1.0, sum(d.confidence for d in decisions) / len(decisions))

        reasoning = (
            f"Swarm consensus reached with {len(decisions)} specialized agents. "
            f"Average confidence: {confidence * 100:.0f}%."
        )
        if degraded:
            reasoning += f" Synthesis unavailable; using the {majority[0].agent_id} recommendation."

        return ConsensusOutcome(
            consensus=consensus,
            confidence=confidence,
            reasoning=reasoning,
            voting_results=calculate_voting(decisions),
            degraded=degraded,
        )
