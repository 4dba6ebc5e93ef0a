"""
Capability Registry - Agent Pool Management

Owns every agent the engine can draw from. Two pool shapes are built from
the same Agent model:
- combinatorial pool: one agent per (role, specialization) pair, confidence
  randomized at creation, rebuilt per orchestrator
- fixed roster: a small named set of e-mail agents whose per-capability
  confidence persists for the process lifetime
"""

import logging
import random
from typing import Dict, List, Optional
from swarmiq.core.models import ActionKind, Agent, AgentRole, Capability
from swarmiq.core.exceptions import AgentNotFound, ConfidenceInvalid, InvalidConfiguration

logger = logging.getLogger(__name__)


# name -> (description, confidence, learning rate)
DEFAULT_CAPABILITIES: Dict[ActionKind, tuple] = {
    ActionKind.CATEGORIZE: ("Categorize emails by content", 0.95, 0.02),
    ActionKind.PRIORITIZE: ("Determine email priority", 0.92, 0.03),
    ActionKind.RESPOND: ("Auto-respond to routine emails", 0.88, 0.04),
    ActionKind.SCHEDULE: ("Schedule meetings from emails", 0.90, 0.02),
    ActionKind.EXTRACT: ("Extract action items", 0.93, 0.03),
    ActionKind.FOLLOWUP: ("Create follow-up reminders", 0.91, 0.02),
    ActionKind.FILTER: ("Filter spam and unwanted emails", 0.97, 0.01),
    ActionKind.DELEGATE: ("Delegate emails to team members", 0.85, 0.05),
}

# agent id -> (role, specializations); the first specialization is the agent's home action
DEFAULT_ROSTER: Dict[str, tuple] = {
    "inbox-manager": (AgentRole.ANALYZER, ["categorize", "intent"]),
    "meeting-scheduler": (AgentRole.SCHEDULER, ["schedule", "meetings"]),
    "follow-up-bot": (AgentRole.SCHEDULER, ["followup", "reminders"]),
    "newsletter-filter": (AgentRole.ANALYZER, ["filter", "newsletter"]),
    "priority-detector": (AgentRole.ANALYZER, ["prioritize", "priority"]),
    "response-generator": (AgentRole.WRITER, ["respond", "formal"]),
    "task-extractor": (AgentRole.RESEARCHER, ["extract", "action-items"]),
    "relationship-manager": (AgentRole.NEGOTIATOR, ["delegate", "stakeholders"]),
}


def default_capabilities() -> Dict[ActionKind, Capability]:
    return {
        kind: Capability(name=kind, description=desc, confidence=conf, learning_rate=rate)
        for kind, (desc, conf, rate) in DEFAULT_CAPABILITIES.items()
    }


class CapabilityRegistry:
    """
    In-memory catalog of agents.

    Responsibilities:
    - Register agents (validating confidence and uniqueness)
    - Materialize the combinatorial pool or the fixed roster
    - Expose the pool to the selector and the swarm
    """

    def __init__(self):
        self.agents: Dict[str, Agent] = {}

    # ---------------------------------------------------------
    # FACTORIES
    # ---------------------------------------------------------

    @classmethod
    def combinatorial(
        cls,
        role_specializations: Dict[str, List[str]],
        rng: Optional[random.Random] = None,
        confidence_range: tuple = (0.7, 1.0),
        learning_rate: float = 0.02
    ) -> "CapabilityRegistry":
        """
        Build one agent per (role, specialization) pair.

        Args:
            role_specializations: {role: [specialization, ...]}
            rng: Random source for initial confidence (seed it for reproducibility)
            confidence_range: Bounds for the initial confidence draw
            learning_rate: Step size assigned to every agent

        Raises:
            InvalidConfiguration: If a role is not a known AgentRole
        """
        rng = rng or random.Random()
        low, high = confidence_range
        registry = cls()

        for role_name, specializations in role_specializations.items():
            try:
                role = AgentRole(role_name)
            except ValueError:
                raise InvalidConfiguration(f"Unknown agent role: {role_name}")

            for spec in specializations:
                registry.register_agent(
                    agent_id=f"{role.value}-{spec}",
                    role=role,
                    specializations=[spec],
                    confidence=low + rng.random() * (high - low),
                    learning_rate=learning_rate
                )

        logger.debug("Built combinatorial pool with %d agents", len(registry.agents))
        return registry

    @classmethod
    def fixed_roster(cls, roster: Optional[Dict[str, tuple]] = None) -> "CapabilityRegistry":
        """
        Build the persistent e-mail roster.

        Every roster agent carries the full capability set; its overall
        confidence is the mean of its capability confidences.
        """
        registry = cls()

        for agent_id, (role, specializations) in (roster or DEFAULT_ROSTER).items():
            capabilities = default_capabilities()
            scores = [c.confidence for c in capabilities.values()]
            registry.register_agent(
                agent_id=agent_id,
                role=role,
                specializations=specializations,
                confidence=sum(scores) / len(scores),
                capabilities=capabilities
            )

        logger.debug("Built fixed roster with %d agents", len(registry.agents))
        return registry

    # ---------------------------------------------------------
    # REGISTRATION + LOOKUP
    # ---------------------------------------------------------

    def register_agent(
        self,
        agent_id: str,
        role: AgentRole,
        specializations: List[str],
        confidence: float,
        learning_rate: float = 0.02,
        capabilities: Optional[Dict[ActionKind, Capability]] = None
    ) -> Agent:
        """
        Register a new agent.

        Raises:
            ConfidenceInvalid: If confidence not in [0.0, 1.0]
            InvalidConfiguration: If the id is already registered
        """
        if not 0.0 <= confidence <= 1.0:
            raise ConfidenceInvalid(f"Confidence must be in [0.0, 1.0], got {confidence}")
        if agent_id in self.agents:
            raise InvalidConfiguration(f"Agent {agent_id} already registered")

        agent = Agent(
            id=agent_id,
            role=role,
            specializations=specializations,
            confidence=confidence,
            learning_rate=learning_rate,
            capabilities=capabilities or {}
        )
        self.agents[agent_id] = agent
        return agent

    def get_agent(self, agent_id: str) -> Agent:
        """Get agent by ID."""
        if agent_id not in self.agents:
            raise AgentNotFound(f"Agent {agent_id} not found in registry")
        return self.agents[agent_id]

    def list_agents(self, role: Optional[AgentRole] = None) -> List[Agent]:
        """List all agents in registration order, optionally filtered by role."""
        agents = list(self.agents.values())
        if role:
            agents = [a for a in agents if a.role == role]
        return agents

    def __len__(self) -> int:
        return len(self.agents)

    def get_agent_statistics(self) -> Dict:
        """Get registry statistics."""
        agents = self.list_agents()

        return {
            "total_agents": len(agents),
            "roles": sorted({a.role.value for a in agents}),
            "specializations": [s for a in agents for s in a.specializations],
            "avg_confidence": sum(a.confidence for a in agents) / len(agents) if agents else 0.0,
            "highest_confidence": max((a.confidence for a in agents), default=0.0),
            "lowest_confidence": min((a.confidence for a in agents), default=0.0)
        }
