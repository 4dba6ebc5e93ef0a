"""
Consensus builder tests.

Majority selection, synthesis prompt, aggregate confidence over all
decisions, vote tally invariants and the degraded fallback.
"""

import pytest

from swarmiq.core.models import AgentRole, Decision
from swarmiq.consensus.consensus_builder import ConsensusBuilder, calculate_voting
from swarmiq.consensus.prompts import CONSENSUS_INSTRUCTION
from swarmiq.execution.function_executor import FunctionGenerator


def make_decision(agent_id, confidence, role=AgentRole.WRITER, spec="formal", text=None):
    return Decision(
        agent_id=agent_id,
        role=role,
        specializations=[spec],
        response=text or f"{agent_id} recommendation",
        confidence=confidence,
    )


def make_decisions():
    return [
        make_decision("writer-formal", 0.9),
        make_decision("writer-casual", 0.6, spec="casual"),
        make_decision("editor-tone", 0.8, role=AgentRole.EDITOR, spec="tone"),
        make_decision("analyzer-risk", 0.95, role=AgentRole.ANALYZER, spec="risk"),
        make_decision("writer-formal-2", 0.7),
    ]


def synthesized(prompt, temperature, max_tokens):
    return "Unified recommendation"


class TestMajority:

    @pytest.mark.parametrize("n,expected", [(1, 1), (2, 2), (5, 3), (7, 5), (10, 6)])
    def test_keeps_ceiling_of_sixty_percent(self, n, expected):
        builder = ConsensusBuilder(FunctionGenerator(synthesized))
        decisions = [make_decision(f"a{i}", 0.5 + i * 0.01) for i in range(n)]
        assert len(builder.majority(decisions)) == expected

    def test_majority_is_highest_confidence_first(self):
        builder = ConsensusBuilder(FunctionGenerator(synthesized))
        majority = builder.majority(make_decisions())
        assert [d.agent_id for d in majority] == ["analyzer-risk", "writer-formal", "editor-tone"]


class TestBuildConsensus:

    def test_synthesis_prompt_lists_majority_in_order(self):
        prompts = []

        def capture(prompt, temperature, max_tokens):
            prompts.append((prompt, temperature, max_tokens))
            return "Unified recommendation"

        ConsensusBuilder(FunctionGenerator(capture)).build_consensus(make_decisions())

        prompt, temperature, max_tokens = prompts[0]
        assert prompt.startswith(CONSENSUS_INSTRUCTION)
        assert (temperature, max_tokens) == (0.5, 600)
        assert prompt.index("analyzer (risk) - Confidence: 95%") < prompt.index("writer (formal) - Confidence: 90%")
        assert "writer-casual recommendation" not in prompt

    def test_aggregate_confidence_is_mean_of_all(self):
        outcome = ConsensusBuilder(FunctionGenerator(synthesized)).build_consensus(make_decisions())
        assert outcome.consensus == "Unified recommendation"
        assert outcome.confidence == pytest.approx((0.9 + 0.6 + 0.8 + 0.95 + 0.7) / 5)
        assert outcome.degraded is False
        assert "5 specialized agents" in outcome.reasoning

    def test_voting_invariants(self):
        decisions = make_decisions()
        outcome = ConsensusBuilder(FunctionGenerator(synthesized)).build_consensus(decisions)
        votes = outcome.voting_results

        assert sum(v.vote_count for v in votes) == len(decisions)
        assert sum(v.weight for v in votes) == pytest.approx(sum(d.confidence for d in decisions))
        assert [v.weight for v in votes] == sorted((v.weight for v in votes), reverse=True)

    def test_votes_grouped_by_role_and_primary_specialization(self):
        votes = {v.option: v for v in calculate_voting(make_decisions())}
        assert votes["writer-formal"].vote_count == 2
        assert votes["writer-formal"].weight == pytest.approx(1.6)
        assert set(votes) == {"writer-formal", "writer-casual", "editor-tone", "analyzer-risk"}

    def test_vote_ties_ordered_by_option(self):
        decisions = [
            make_decision("b", 0.8, role=AgentRole.EDITOR, spec="tone"),
            make_decision("a", 0.8, role=AgentRole.ANALYZER, spec="risk"),
        ]
        assert [v.option for v in calculate_voting(decisions)] == ["analyzer-risk", "editor-tone"]

    def test_blank_synthesis_falls_back_to_best_decision(self):
        builder = ConsensusBuilder(FunctionGenerator(lambda p, t, m: "  \n "))
        outcome = builder.build_consensus(make_decisions())

        assert outcome.degraded is True
        assert outcome.consensus == "analyzer-risk recommendation"
        assert "analyzer-risk" in outcome.reasoning

    def test_failed_synthesis_falls_back(self):
        def down(prompt, temperature, max_tokens):
            raise TimeoutError("no answer")

        outcome = ConsensusBuilder(FunctionGenerator(down)).build_consensus(make_decisions())
        assert outcome.degraded is True
        assert outcome.consensus == "analyzer-risk recommendation"
        assert outcome.confidence == pytest.approx(0.79)

    def test_empty_input(self):
        generator = FunctionGenerator(synthesized)
        outcome = ConsensusBuilder(generator).build_consensus([])

        assert outcome.consensus == ""
        assert outcome.confidence == 0.0
        assert outcome.voting_results == []
        assert generator.calls == 0
