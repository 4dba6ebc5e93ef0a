from typing import Union
from swarmiq.core.models import ActionKind, Agent, Decision, Outcome


def apply_outcome(
    confidence: float,
    learning_rate: float,
    outcome: Outcome,
    floor: float = 0.5,
    ceiling: float = 1.0
) -> float:
    # Floor above zero: a bad run never excludes an agent for good
    step = learning_rate if outcome == Outcome.SUCCESS else -learning_rate
    return min(ceiling, max(floor, confidence + step))


def record_outcome(
    agent: Agent,
    decision: Decision,
    outcome: Union[Outcome, str, bool],
    floor: float = 0.5,
    ceiling: float = 1.0
) -> float:
    """
    Adjust the acting agent's confidence for the capability it exercised.

    Agents without a matching capability (ad-hoc pool agents) have their
    overall confidence adjusted with their own learning rate instead.
    The read-modify-write runs under the agent's lock.

    Returns:
        The new confidence value
    """
    if isinstance(outcome, bool):
        outcome = Outcome.SUCCESS if outcome else Outcome.FAILURE
    outcome = Outcome(outcome)
    kind = ActionKind.parse(decision.action)

    with agent.lock:
        capability = agent.capabilities.get(kind)
        if capability is None:
            updated = apply_outcome(agent.confidence, agent.learning_rate, outcome, floor, ceiling)
            agent.set_confidence(updated)
        else:
            updated = apply_outcome(capability.confidence, capability.learning_rate, outcome, floor, ceiling)
            agent.set_capability_confidence(kind, updated)

    return updated
