"""
End-to-end ad-hoc swarm scenarios.

Full select -> decide -> validate -> consensus -> alternatives runs with
deterministic and scripted generators.
"""

import random

import pytest

from swarmiq.core.config import SwarmIQConfig, SwarmSettings
from swarmiq.core.exceptions import EmptyPoolError, NoParticipantsError
from swarmiq.core.models import AgentRole
from swarmiq.consensus.orchestrator import SwarmOrchestrator
from swarmiq.consensus.prompts import ALTERNATIVES_INSTRUCTION, CONSENSUS_INSTRUCTION
from swarmiq.execution.deterministic_executor import DeterministicGenerator
from swarmiq.execution.function_executor import FunctionGenerator
from swarmiq.persistence.agent_registry import CapabilityRegistry


def make_config(seed=42, **swarm):
    return SwarmIQConfig(swarm=SwarmSettings(seed=seed, **swarm))


def make_small_registry(confidence=0.9):
    registry = CapabilityRegistry()
    registry.register_agent("writer-formal", AgentRole.WRITER, ["formal"], confidence)
    registry.register_agent("analyzer-risk", AgentRole.ANALYZER, ["risk"], confidence)
    registry.register_agent("editor-tone", AgentRole.EDITOR, ["tone"], confidence)
    registry.register_agent("strategist-timing", AgentRole.STRATEGIST, ["timing"], confidence)
    return registry


def scripted(failing_role=None, synthesis="Unified plan"):
    """Per-role decisions, fixed synthesis, two alternatives."""

    def generate(prompt, temperature, max_tokens):
        if prompt.startswith(CONSENSUS_INSTRUCTION):
            if synthesis is None:
                raise ConnectionError("synthesis backend down")
            return synthesis
        if prompt.startswith(ALTERNATIVES_INSTRUCTION.split("{")[0]):
            return "Alt A\n\nAlt B"
        role = prompt.split("role of ", 1)[1].split(" ", 1)[0]
        if role == failing_role:
            raise ConnectionError(f"{role} backend down")
        return f"{role} plan for the request"

    return FunctionGenerator(generate)


class TestScenarioFormalDecline:
    """Seven agents agree on a formal decline."""

    def setup_method(self):
        self.generator = DeterministicGenerator()
        self.orchestrator = SwarmOrchestrator.from_config(make_config(), self.generator)
        self.result = self.orchestrator.process_task(
            "Compose a formal decline for a vendor meeting request",
            context={"email_type": "formal"},
        )

    def test_seven_participants(self):
        assert len(self.result.agent_decisions) == 7
        assert self.result.failed_agents == []

    def test_high_confidence_without_alternatives(self):
        assert self.result.confidence > 0.75
        assert self.result.alternatives == []
        assert self.result.meets_threshold is True
        assert self.result.degraded is False

    def test_consensus_text(self):
        assert "Compose a formal decline for a vendor meeting request" in self.result.consensus
        assert self.result.reasoning.startswith("Swarm consensus reached with 7 specialized agents.")

    def test_voting_invariants(self):
        votes = self.result.voting_results
        decisions = self.result.agent_decisions
        assert sum(v.vote_count for v in votes) == len(decisions)
        assert sum(v.weight for v in votes) == pytest.approx(sum(d.confidence for d in decisions))

    def test_every_decision_was_validated(self):
        for decision in self.result.agent_decisions:
            assert decision.vote is not None
            assert 0.0 <= decision.confidence <= 1.0

    def test_pool_carries_validated_confidence(self):
        for decision in self.result.agent_decisions:
            assert self.orchestrator.registry.get_agent(decision.agent_id).confidence == decision.confidence


class TestScenarioEmptyPool:

    def test_zero_agents_requested(self):
        generator = FunctionGenerator(lambda p, t, m: "never")
        orchestrator = SwarmOrchestrator.from_config(make_config(), generator)

        with pytest.raises(EmptyPoolError):
            orchestrator.process_task("Reply to the client", agent_count=0)
        assert generator.calls == 0

    def test_empty_role_table(self):
        generator = FunctionGenerator(lambda p, t, m: "never")
        orchestrator = SwarmOrchestrator.from_config(make_config(role_specializations={}), generator)

        with pytest.raises(EmptyPoolError):
            orchestrator.process_task("Reply to the client")
        assert generator.calls == 0


class TestDegradedPool:

    def test_failed_agent_is_dropped(self):
        orchestrator = SwarmOrchestrator(make_small_registry(), scripted(failing_role="analyzer"))
        result = orchestrator.process_task("plan the launch", agent_count=4)

        assert result.failed_agents == ["analyzer-risk"]
        assert len(result.agent_decisions) == 3
        assert sum(v.vote_count for v in result.voting_results) == 3
        assert result.consensus == "Unified plan"

    def test_all_agents_failing(self):
        def down(prompt, temperature, max_tokens):
            raise ConnectionError("down")

        orchestrator = SwarmOrchestrator(make_small_registry(), FunctionGenerator(down))
        with pytest.raises(NoParticipantsError):
            orchestrator.process_task("plan the launch", agent_count=4)

    def test_synthesis_failure_degrades(self):
        orchestrator = SwarmOrchestrator(make_small_registry(), scripted(synthesis=None))
        result = orchestrator.process_task("plan the launch", agent_count=4)

        assert result.degraded is True
        assert result.consensus.endswith("plan for the request")
        assert len(result.agent_decisions) == 4


class TestMinorityAlternatives:

    def test_low_confidence_swarm_produces_alternatives(self):
        orchestrator = SwarmOrchestrator(make_small_registry(confidence=0.3), scripted())
        result = orchestrator.process_task("plan the launch", agent_count=4, consensus_threshold=0.7)

        assert result.alternatives == ["Alt A", "Alt B"]
        assert result.reasoning.endswith("2 alternative approaches identified.")
        assert result.meets_threshold is False

    def test_threshold_is_advisory(self):
        orchestrator = SwarmOrchestrator(make_small_registry(confidence=0.3), scripted())
        result = orchestrator.process_task("plan the launch", agent_count=4, consensus_threshold=0.99)
        assert result.consensus == "Unified plan"


class TestReproducibility:

    def test_same_seed_same_result(self):
        a = SwarmOrchestrator.from_config(make_config(seed=7), DeterministicGenerator())
        b = SwarmOrchestrator.from_config(make_config(seed=7), DeterministicGenerator())

        ra = a.process_task("Schedule a call with the vendor", context={"urgent": True})
        rb = b.process_task("Schedule a call with the vendor", context={"urgent": True})

        assert [d.agent_id for d in ra.agent_decisions] == [d.agent_id for d in rb.agent_decisions]
        assert ra.confidence == rb.confidence

    def test_explicit_rng_overrides_seed(self):
        a = SwarmOrchestrator.from_config(make_config(seed=None), DeterministicGenerator(), rng=random.Random(3))
        b = SwarmOrchestrator.from_config(make_config(seed=None), DeterministicGenerator(), rng=random.Random(3))
        assert [x.confidence for x in a.registry.list_agents()] == [y.confidence for y in b.registry.list_agents()]

    def test_status_describes_the_seeded_pool(self):
        orchestrator = SwarmOrchestrator.from_config(make_config(seed=7), DeterministicGenerator())
        status = orchestrator.get_swarm_status()

        assert status["total_agents"] == 35
        assert len(status["roles"]) == 7
        assert 0.7 <= status["lowest_confidence"] <= status["highest_confidence"] < 1.0

    def test_urgent_context_favours_schedulers(self):
        orchestrator = SwarmOrchestrator.from_config(make_config(seed=7), DeterministicGenerator())
        result = orchestrator.process_task("reply", context={"urgent": True}, agent_count=5)
        assert all(d.role == AgentRole.SCHEDULER for d in result.agent_decisions)
