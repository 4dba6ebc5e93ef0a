"""
Cross-validation tests.

peer_score = (jaccard + role alignment) / 2; confidence moves halfway
toward the mean peer score, which is also recorded as the vote.
"""

import pytest

from swarmiq.core.config import ValidationConfig
from swarmiq.core.models import AgentRole, Decision
from swarmiq.consensus.cross_validator import CrossValidator, jaccard_similarity, token_set


def make_decision(agent_id, role, text, confidence):
    return Decision(agent_id=agent_id, role=role, specializations=["x"], response=text, confidence=confidence)


class TestJaccard:

    def test_identical_sets(self):
        assert jaccard_similarity(token_set("Send the Report"), token_set("send the report")) == 1.0

    def test_partial_overlap(self):
        # {a, b, c} vs {b, c, d}: 2 shared of 4
        assert jaccard_similarity(token_set("a b c"), token_set("b c d")) == pytest.approx(0.5)

    def test_two_empty_texts_score_zero(self):
        assert jaccard_similarity(token_set(""), token_set("   ")) == 0.0


class TestCrossValidate:

    def setup_method(self):
        self.validator = CrossValidator()

    def test_identical_same_role_decisions(self):
        decisions = [
            make_decision("writer-formal", AgentRole.WRITER, "decline politely", 0.8),
            make_decision("writer-casual", AgentRole.WRITER, "decline politely", 0.8),
        ]
        validated = self.validator.cross_validate(decisions)

        for d in validated:
            assert d.vote == pytest.approx(0.9)
            assert d.confidence == pytest.approx(0.85)

    def test_disjoint_cross_role_decisions(self):
        decisions = [
            make_decision("writer-formal", AgentRole.WRITER, "decline politely", 0.9),
            make_decision("analyzer-risk", AgentRole.ANALYZER, "escalate now", 0.7),
        ]
        validated = self.validator.cross_validate(decisions)

        assert validated[0].vote == pytest.approx(0.3)
        assert validated[0].confidence == pytest.approx(0.6)
        assert validated[1].confidence == pytest.approx(0.5)

    def test_mean_over_all_peers(self):
        decisions = [
            make_decision("a", AgentRole.WRITER, "same words", 0.8),
            make_decision("b", AgentRole.WRITER, "same words", 0.8),
            make_decision("c", AgentRole.EDITOR, "other", 0.8),
        ]
        first = self.validator.cross_validate(decisions)[0]
        # peers: b -> (1 + 0.8)/2 = 0.9, c -> (0 + 0.6)/2 = 0.3
        assert first.vote == pytest.approx(0.6)
        assert first.confidence == pytest.approx(0.7)

    def test_lone_decision_keeps_confidence(self):
        validated = self.validator.cross_validate([make_decision("a", AgentRole.WRITER, "alone", 0.83)])
        assert validated[0].confidence == pytest.approx(0.83)
        assert validated[0].vote == pytest.approx(0.83)

    def test_empty_input(self):
        assert self.validator.cross_validate([]) == []

    def test_inputs_are_not_mutated(self):
        decisions = [
            make_decision("a", AgentRole.WRITER, "x y", 0.9),
            make_decision("b", AgentRole.EDITOR, "y z", 0.7),
        ]
        validated = self.validator.cross_validate(decisions)

        assert decisions[0].confidence == 0.9 and decisions[0].vote is None
        assert validated[0] is not decisions[0]
        assert [d.agent_id for d in validated] == ["a", "b"]

    def test_alignment_weights_from_config(self):
        validator = CrossValidator(ValidationConfig(same_role_alignment=1.0, cross_role_alignment=0.0))
        decisions = [
            make_decision("a", AgentRole.WRITER, "", 0.5),
            make_decision("b", AgentRole.WRITER, "", 0.5),
        ]
        # Empty texts: jaccard 0, alignment 1.0
        assert validator.cross_validate(decisions)[0].vote == pytest.approx(0.5)

    def test_confidence_stays_in_bounds(self):
        decisions = [make_decision(str(i), AgentRole.WRITER, "same", 1.0) for i in range(5)]
        for d in self.validator.cross_validate(decisions):
            assert 0.0 <= d.confidence <= 1.0
