"""
Adaptive learning tests.

Success raises confidence by the learning rate up to 1.0; failure lowers
it down to the 0.5 floor. Roster agents learn per capability.
"""

import random

import pytest

from swarmiq.core.models import ActionKind, Agent, AgentRole, Capability, Decision, Outcome
from swarmiq.consensus.learning_engine import apply_outcome, record_outcome
from swarmiq.persistence.agent_registry import CapabilityRegistry


def make_decision(agent, action):
    return Decision(
        agent_id=agent.id,
        role=agent.role,
        specializations=agent.specializations,
        response="done",
        action=action,
        confidence=0.9,
    )


def make_roster_agent():
    return CapabilityRegistry.fixed_roster().get_agent("inbox-manager")


class TestApplyOutcome:

    def test_success_adds_learning_rate(self):
        assert apply_outcome(0.9, 0.02, Outcome.SUCCESS) == pytest.approx(0.92)

    def test_success_capped_at_one(self):
        assert apply_outcome(0.99, 0.05, Outcome.SUCCESS) == 1.0

    def test_failure_subtracts_learning_rate(self):
        assert apply_outcome(0.9, 0.05, Outcome.FAILURE) == pytest.approx(0.85)

    def test_failure_floored(self):
        assert apply_outcome(0.51, 0.05, Outcome.FAILURE) == 0.5

    def test_success_below_floor_lifted_to_floor(self):
        assert apply_outcome(0.3, 0.02, Outcome.SUCCESS) == 0.5

    def test_custom_bounds(self):
        assert apply_outcome(0.3, 0.1, Outcome.FAILURE, floor=0.25) == 0.25
        assert apply_outcome(0.85, 0.1, Outcome.SUCCESS, ceiling=0.9) == 0.9


class TestRecordOutcome:

    def test_adjusts_named_capability_and_overall_mean(self):
        agent = make_roster_agent()
        before = agent.capabilities[ActionKind.DELEGATE].confidence

        updated = record_outcome(agent, make_decision(agent, "delegate"), Outcome.SUCCESS)

        assert updated == pytest.approx(before + 0.05)
        assert agent.capabilities[ActionKind.DELEGATE].confidence == pytest.approx(before + 0.05)
        scores = [c.confidence for c in agent.capabilities.values()]
        assert agent.confidence == pytest.approx(sum(scores) / len(scores))

    def test_other_capabilities_untouched(self):
        agent = make_roster_agent()
        record_outcome(agent, make_decision(agent, "respond"), Outcome.FAILURE)
        assert agent.capabilities[ActionKind.FILTER].confidence == pytest.approx(0.97)
        assert agent.capabilities[ActionKind.RESPOND].confidence == pytest.approx(0.84)

    def test_accepts_bool_and_string_outcomes(self):
        agent = make_roster_agent()
        record_outcome(agent, make_decision(agent, "schedule"), True)
        record_outcome(agent, make_decision(agent, "schedule"), "success")
        assert agent.capabilities[ActionKind.SCHEDULE].confidence == pytest.approx(0.94)

    def test_agent_without_capability_adjusts_overall_confidence(self):
        agent = Agent(id="writer-formal", role=AgentRole.WRITER, specializations=["formal"], confidence=0.8)
        record_outcome(agent, make_decision(agent, None), Outcome.FAILURE)
        assert agent.confidence == pytest.approx(0.78)

    def test_low_capability_success_lands_in_bounds(self):
        registry = CapabilityRegistry()
        agent = registry.register_agent(
            "a",
            AgentRole.ANALYZER,
            ["categorize"],
            0.3,
            capabilities={
                ActionKind.CATEGORIZE: Capability(name=ActionKind.CATEGORIZE, confidence=0.3, learning_rate=0.02)
            },
        )

        updated = record_outcome(agent, make_decision(agent, "categorize"), Outcome.SUCCESS)

        assert 0.5 <= updated <= 1.0
        assert 0.5 <= agent.confidence <= 1.0

    def test_low_confidence_agent_without_capability_lands_in_bounds(self):
        agent = Agent(id="writer-formal", role=AgentRole.WRITER, specializations=["formal"], confidence=0.4)
        updated = record_outcome(agent, make_decision(agent, None), Outcome.SUCCESS)
        assert updated == 0.5
        assert agent.confidence == 0.5

    def test_random_outcomes_stay_in_bounds(self):
        agent = make_roster_agent()
        rng = random.Random(7)
        for _ in range(300):
            action = rng.choice(ActionKind.known()).value
            outcome = rng.choice([Outcome.SUCCESS, Outcome.FAILURE])
            record_outcome(agent, make_decision(agent, action), outcome)

            for capability in agent.capabilities.values():
                assert 0.5 <= capability.confidence <= 1.0
            assert 0.5 <= agent.confidence <= 1.0

