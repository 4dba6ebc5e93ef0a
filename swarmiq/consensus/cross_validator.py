"""
Cross-Validator - Peer review of agent decisions

Each decision is scored against every other decision:

    peer_score(i, j) = (jaccard(text_i, text_j) + alignment(role_i, role_j)) / 2

The mean peer score becomes the decision's vote, and its confidence moves
halfway toward it:

    confidence_i = (confidence_i + mean_peer_score_i) / 2

Rows are computed on the worker pool. Decisions are immutable; adjusted
copies are returned.
"""

import logging
from typing import FrozenSet, List, Optional
from swarmiq.core.config import ExecutorConfig, ValidationConfig
from swarmiq.core.models import Decision
from swarmiq.execution.worker_pool import run_parallel

logger = logging.getLogger(__name__)


def token_set(text: str) -> FrozenSet[str]:
    return frozenset((text or "").lower().split())


def jaccard_similarity(a: FrozenSet[str], b: FrozenSet[str]) -> float:
    union = a | b
    if not union:
        return 0.0
    return len(a & b) / len(union)


class CrossValidator:
    def __init__(
        self,
        config: Optional[ValidationConfig] = None,
        executor_config: Optional[ExecutorConfig] = None
    ):
        self.config = config or ValidationConfig()
        self.executor_config = executor_config or ExecutorConfig()

    def role_alignment(self, validator: Decision, target: Decision) -> float:
        if validator.role == target.role:
            return self.config.same_role_alignment
        return self.config.cross_role_alignment

    def peer_score(self, validator: Decision, target: Decision, tokens=None) -> float:
        """Score target's decision from validator's point of view."""
        a, b = tokens if tokens else (token_set(validator.text), token_set(target.text))
        return (jaccard_similarity(a, b) + self.role_alignment(validator, target)) / 2

    def cross_validate(self, decisions: List[Decision]) -> List[Decision]:
        if not decisions:
            return []

        tokens = [token_set(d.text) for d in decisions]

        def validate_row(i: int) -> float:
            scores = [
                self.peer_score(decisions[i], decisions[j], (tokens[i], tokens[j]))
                for j in range(len(decisions)) if j != i
            ]
            if not scores:
                # No peers: nothing to move toward
                return decisions[i].confidence
            return sum(scores) / len(scores)

        outcomes = run_parallel(
            validate_row,
            list(range(len(decisions))),
            max_workers=self.executor_config.max_workers,
        )

        validated = []
        for outcome in outcomes:
            if not outcome.ok:
                raise outcome.error
            decision = decisions[outcome.item]
            avg = outcome.value
            validated.append(decision.model_copy(update={
                "confidence": min(1.0, max(0.0, (decision.confidence + avg) / 2)),
                "vote": avg,
            }))

        logger.debug("Cross-validated %d decisions", len(validated))
        return validated
