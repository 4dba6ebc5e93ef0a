"""
Swarm Orchestrator - Ad-hoc consensus pipeline

Runs one task through the full swarm cycle:
1. Agent selection (relevance x confidence)
2. Parallel decision phase
3. Cross-validation
4. Consensus synthesis + weighted voting
5. Alternatives from minority opinions

Each orchestrator owns a fresh agent pool; the validation-adjusted
confidences are written back to that pool only.
"""

import logging
import random
from typing import Any, Dict, Optional
from swarmiq.core.config import SwarmIQConfig
from swarmiq.core.exceptions import EmptyPoolError, NoParticipantsError
from swarmiq.core.models import ConsensusResult, Task
from swarmiq.consensus.alternatives import AlternativeGenerator
from swarmiq.consensus.consensus_builder import ConsensusBuilder
from swarmiq.consensus.cross_validator import CrossValidator
from swarmiq.consensus.decision_phase import ParallelDecisionPhase
from swarmiq.consensus.selector import RelevanceSelector
from swarmiq.execution.base import BaseGenerator
from swarmiq.persistence.agent_registry import CapabilityRegistry

logger = logging.getLogger(__name__)


class SwarmOrchestrator:
    """
    Main ad-hoc swarm orchestrator.

    Coordinates selection, decision, validation and synthesis to turn a
    single task into one consensus decision plus alternatives.
    """

    def __init__(
        self,
        registry: CapabilityRegistry,
        generator: BaseGenerator,
        config: Optional[SwarmIQConfig] = None
    ):
        """
        Initialize orchestrator.

        Args:
            registry: Agent pool to draw from
            generator: Text-generation collaborator shared by every phase
            config: Master configuration (defaults when omitted)
        """
        self.config = config or SwarmIQConfig()
        self.registry = registry
        self.generator = generator

        self.selector = RelevanceSelector(self.config.selection)
        self.decision_phase = ParallelDecisionPhase(generator, self.config.executor)
        self.validator = CrossValidator(self.config.validation, self.config.executor)
        self.builder = ConsensusBuilder(generator, self.config.swarm, self.config.executor)
        self.alternatives = AlternativeGenerator(generator, self.config.swarm, self.config.executor)

    @classmethod
    def from_config(
        cls,
        config: SwarmIQConfig,
        generator: BaseGenerator,
        rng: Optional[random.Random] = None
    ) -> "SwarmOrchestrator":
        """Build an orchestrator over a fresh combinatorial pool."""
        settings = config.swarm
        rng = rng or random.Random(settings.seed)
        registry = CapabilityRegistry.combinatorial(
            settings.role_specializations,
            rng=rng,
            confidence_range=(settings.initial_confidence_min, settings.initial_confidence_max),
            learning_rate=settings.default_learning_rate,
        )
        return cls(registry, generator, config)

    def process_task(
        self,
        description: str,
        context: Optional[Dict[str, Any]] = None,
        agent_count: Optional[int] = None,
        consensus_threshold: Optional[float] = None
    ) -> ConsensusResult:
        """
        Run one task through the swarm.

        Args:
            description: What the swarm should decide
            context: Free-form task context (email_type, urgent, needs_research, ...)
            agent_count: Agents to select (default from settings)
            consensus_threshold: Advisory threshold reported via meets_threshold

        Returns:
            ConsensusResult

        Raises:
            EmptyPoolError: When selection yields zero agents
            NoParticipantsError: When every selected agent failed
        """
        settings = self.config.swarm
        task = Task(
            description=description,
            context=context or {},
            required_agent_count=settings.default_agent_count if agent_count is None else agent_count,
            consensus_threshold=settings.consensus_threshold if consensus_threshold is None else consensus_threshold,
        )

        # Step 1: Select agents
        selected = self.selector.select_agents(task, self.registry.list_agents())
        if not selected:
            raise EmptyPoolError(
                f"No agents selected for task {task.id} "
                f"(pool size {len(self.registry)}, requested {task.required_agent_count})"
            )
        logger.info("Task %s: selected %d agents", task.id, len(selected))

        # Step 2: Independent decisions
        phase = self.decision_phase.produce_decisions(task, selected)
        if not phase.decisions:
            raise NoParticipantsError(
                f"All {len(selected)} selected agents failed for task {task.id}"
            )

        # Step 3: Peer review
        validated = self.validator.cross_validate(phase.decisions)
        for decision in validated:
            self.registry.get_agent(decision.agent_id).set_confidence(decision.confidence)

        # Step 4: Consensus
        outcome = self.builder.build_consensus(validated)

        # Step 5: Alternatives
        alternatives = self.alternatives.generate_alternatives(validated, outcome.consensus)

        reasoning = outcome.reasoning
        if alternatives:
            reasoning += f" {len(alternatives)} alternative approaches identified."

        meets_threshold = outcome.confidence >= task.consensus_threshold
        if not meets_threshold:
            logger.warning(
                "Task %s: consensus confidence %.2f below advisory threshold %.2f",
                task.id, outcome.confidence, task.consensus_threshold
            )

        return ConsensusResult(
            task_id=task.id,
            consensus=outcome.consensus,
            confidence=outcome.confidence,
            agent_decisions=validated,
            alternatives=alternatives,
            reasoning=reasoning,
            voting_results=outcome.voting_results,
            degraded=outcome.degraded,
            failed_agents=phase.failed_agents,
            meets_threshold=meets_threshold,
        )

    def get_swarm_status(self) -> Dict:
        """Get pool statistics."""
        return self.registry.get_agent_statistics()
