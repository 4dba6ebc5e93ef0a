"""
Persistent Swarm - Fixed e-mail roster with weighted action voting

Every roster agent decides concurrently; the coordinator sums decision
confidences per action and the heaviest action wins:

    confidence = winning weight / number of decisions

Executing the consensus routes the action to the agent with the highest
capability confidence for it. Agents and their confidences live for the
lifetime of the swarm object.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple, Union
from swarmiq.core.config import SwarmIQConfig
from swarmiq.core.exceptions import AgentNotFound, NoParticipantsError
from swarmiq.core.models import ActionKind, Decision, Email, Impact, Outcome, RosterDecisionResult
from swarmiq.execution.base import BaseGenerator
from swarmiq.execution.factory import build_generator
from swarmiq.execution.worker_pool import run_parallel
from swarmiq.persistence.agent_memory import AgentMemory
from swarmiq.persistence.agent_registry import CapabilityRegistry
from swarmiq.roster.actions import ActionResult, RejectedResult
from swarmiq.roster.agent import RosterAgent

logger = logging.getLogger(__name__)


def reach_consensus(decisions: List[Decision]) -> Tuple[str, float]:
    """Confidence-weighted vote over actions; first action to reach the top weight wins ties."""
    if not decisions:
        return "", 0.0

    votes: Dict[str, float] = {}
    for decision in decisions:
        votes[decision.action] = votes.get(decision.action, 0.0) + decision.confidence

    best_action, best_weight = "", 0.0
    for action, weight in votes.items():
        if weight > best_weight:
            best_action, best_weight = action, weight

    return best_action, min(1.0, best_weight / len(decisions))


class PersistentSwarm:
    """
    The named e-mail roster.

    Responsibilities:
    - Collect one decision per agent for an e-mail
    - Coordinate a weighted action vote
    - Execute the winning action through the most capable agent
    - Apply outcome feedback and report metrics
    """

    def __init__(
        self,
        registry: Optional[CapabilityRegistry] = None,
        generator: Optional[BaseGenerator] = None,
        config: Optional[SwarmIQConfig] = None,
        memory: Optional[AgentMemory] = None,
        clock=None
    ):
        """
        Initialize swarm.

        Args:
            registry: Roster to wrap (default: the fixed e-mail roster)
            generator: Backend for JSON decisions; None uses the heuristic
            config: Master configuration
            memory: Shared decision/outcome history
            clock: Time source for scheduling actions
        """
        self.config = config or SwarmIQConfig()
        self.registry = registry or CapabilityRegistry.fixed_roster()
        self.memory = memory or AgentMemory()
        self.agents: Dict[str, RosterAgent] = {
            agent.id: RosterAgent(
                agent,
                self.memory,
                generator=generator,
                config=self.config.roster,
                executor_config=self.config.executor,
                clock=clock,
            )
            for agent in self.registry.list_agents()
        }

    @classmethod
    def from_config(cls, config: SwarmIQConfig, generator: Optional[BaseGenerator] = None) -> "PersistentSwarm":
        """Roster decisions only go to a generator on the llm backend."""
        if generator is None and config.executor.backend == "llm":
            generator = build_generator(config.executor)
        return cls(generator=generator, config=config)

    def get_agent(self, agent_id: str) -> RosterAgent:
        if agent_id not in self.agents:
            raise AgentNotFound(f"Agent {agent_id} not found in roster")
        return self.agents[agent_id]

    # ---------------------------------------------------------
    # DECISIONS
    # ---------------------------------------------------------

    def process_decision(self, email: Union[Email, Dict[str, Any]]) -> RosterDecisionResult:
        """
        Ask every roster agent what to do with an e-mail.

        Raises:
            NoParticipantsError: If no agent produced a decision
        """
        if not isinstance(email, Email):
            email = Email.model_validate(email)

        outcomes = run_parallel(
            lambda roster_agent: roster_agent.make_decision(email),
            list(self.agents.values()),
            max_workers=self.config.executor.max_workers,
            timeout=self.config.executor.agent_timeout,
        )

        decisions = []
        for outcome in outcomes:
            if outcome.ok:
                decisions.append(outcome.value)
            else:
                logger.warning("Agent %s gave no decision for email %s: %s", outcome.item.id, email.id, outcome.error)

        if not decisions:
            raise NoParticipantsError(f"No roster agent decided on email {email.id}")

        action, confidence = reach_consensus(decisions)
        logger.info("Email %s: consensus %s (%.2f) from %d agents", email.id, action, confidence, len(decisions))
        return RosterDecisionResult(decisions=decisions, consensus=action, confidence=confidence)

    # ---------------------------------------------------------
    # EXECUTION + FEEDBACK
    # ---------------------------------------------------------

    def select_responsible_agent(self, action: str) -> Optional[RosterAgent]:
        kind = ActionKind.parse(action)
        best, highest = None, 0.0
        for roster_agent in self.agents.values():
            confidence = roster_agent.capability_confidences().get(kind)
            if confidence is not None and confidence > highest:
                best, highest = roster_agent, confidence
        return best

    def execute_consensus(self, action: str, email: Union[Email, Dict[str, Any]]) -> ActionResult:
        if not isinstance(email, Email):
            email = Email.model_validate(email)

        responsible = self.select_responsible_agent(action)
        if responsible is None:
            return RejectedResult(action=action or "", reason="No capable agent found")

        decision = Decision(
            agent_id=responsible.id,
            role=responsible.agent.role,
            specializations=list(responsible.agent.specializations),
            response="Swarm consensus decision",
            reasoning="Swarm consensus decision",
            action=ActionKind.parse(action).value,
            confidence=self.config.roster.consensus_decision_confidence,
            impact=Impact.HIGH,
        )
        return responsible.execute_action(decision, email)

    def record_outcome(self, agent_id: str, action: str, outcome: Union[Outcome, str]) -> float:
        """
        Raises:
            AgentNotFound: If the agent is not on the roster
            ValueError: If the action is unknown
        """
        return self.get_agent(agent_id).record_outcome(action, Outcome(outcome))

    def get_swarm_metrics(self) -> Dict[str, Any]:
        agents = [roster_agent.get_performance_metrics() for roster_agent in self.agents.values()]
        return {
            "total_agents": len(agents),
            "average_confidence": sum(a["confidence"] for a in agents) / len(agents) if agents else 0.0,
            "agents": agents,
        }
