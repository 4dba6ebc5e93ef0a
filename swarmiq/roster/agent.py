"""
Roster Agent - Autonomous e-mail agent with per-capability learning

Decision flow:
    Idle -> Deciding -> Validated -> ExecutingAction -> {Succeeded, Failed, Rejected} -> Idle

Deciding asks the generator for a JSON decision and validates it; bad
JSON, an unknown action or a failed call falls back to the keyword
heuristic. Only Succeeded and Failed move confidence.
"""

import json
import logging
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, ValidationError

from swarmiq.core.config import ExecutorConfig, RosterConfig
from swarmiq.core.exceptions import AgentCallFailure, MalformedSynthesisOutput
from swarmiq.core.models import ActionKind, Agent, Decision, Email, Impact, Outcome
from swarmiq.consensus import learning_engine
from swarmiq.consensus.prompts import ROSTER_DECISION_PROMPT
from swarmiq.execution.base import BaseGenerator
from swarmiq.persistence.agent_memory import AgentMemory
from swarmiq.roster.actions import (
    ActionContext,
    ActionResult,
    FailedResult,
    RejectedResult,
    perform_action,
    suggest_action,
    utcnow,
)

logger = logging.getLogger(__name__)


class RosterDecisionPayload(BaseModel):
    """Shape the generator is asked to return."""
    action: str
    reasoning: str = ""
    confidence: float = Field(..., ge=0.0, le=1.0)
    alternatives: List[str] = Field(default_factory=list)
    impact: Impact = Impact.MEDIUM


def parse_decision_json(text: str) -> RosterDecisionPayload:
    """
    Parse a generator reply into a decision payload.

    Tolerates markdown code fences and prose around the JSON object.

    Raises:
        MalformedSynthesisOutput: If no valid decision object can be read
    """
    text = (text or "").strip()
    if text.startswith("```"):
        lines = [line for line in text.split("\n") if not line.strip().startswith("```")]
        text = "\n".join(lines)

    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        start = text.find("{")
        end = text.rfind("}") + 1
        if start < 0 or end <= start:
            raise MalformedSynthesisOutput(f"no JSON object in reply: {text[:200]}")
        try:
            data = json.loads(text[start:end])
        except json.JSONDecodeError as e:
            raise MalformedSynthesisOutput(f"invalid JSON in reply: {e}") from e

    if not isinstance(data, dict):
        raise MalformedSynthesisOutput("decision reply is not a JSON object")
    try:
        return RosterDecisionPayload.model_validate(data)
    except ValidationError as e:
        raise MalformedSynthesisOutput(f"decision reply failed validation: {e}") from e


class RosterAgent:
    """
    One member of the persistent roster.

    Wraps an Agent (identity and capability confidences) with the
    collaborators it needs to decide, act and learn.
    """

    def __init__(
        self,
        agent: Agent,
        memory: AgentMemory,
        generator: Optional[BaseGenerator] = None,
        config: Optional[RosterConfig] = None,
        executor_config: Optional[ExecutorConfig] = None,
        clock=None
    ):
        self.agent = agent
        self.memory = memory
        self.generator = generator
        self.config = config or RosterConfig()
        self.executor_config = executor_config or ExecutorConfig()
        self.action_context = ActionContext(config=self.config, clock=clock or utcnow)

    @property
    def id(self) -> str:
        return self.agent.id

    def capability_confidences(self) -> Dict[ActionKind, float]:
        with self.agent.lock:
            return {kind: cap.confidence for kind, cap in self.agent.capabilities.items()}

    # ---------------------------------------------------------
    # DECIDING
    # ---------------------------------------------------------

    def make_decision(self, email: Email) -> Decision:
        """Decide what to do with an e-mail and remember the decision."""
        decision = None
        if self.generator is not None:
            try:
                decision = self._generated_decision(email)
            except (AgentCallFailure, MalformedSynthesisOutput) as e:
                logger.warning("Agent %s: using heuristic decision: %s", self.id, e)

        if decision is None:
            decision = self._heuristic_decision(email)

        self.memory.record_decision(self.id, decision, context={
            "sender": email.sender,
            "subject": email.subject,
            "length": len(email.body),
            "has_attachment": email.has_attachment,
        })
        return decision

    def build_prompt(self, email: Email) -> str:
        capabilities = "\n".join(
            f"- {kind.value}: {confidence * 100:.0f}%"
            for kind, confidence in self.capability_confidences().items()
        )
        return ROSTER_DECISION_PROMPT.format(
            agent_id=self.id,
            role=self.agent.role.value,
            specializations=", ".join(self.agent.specializations),
            capabilities=capabilities,
            sender=email.sender,
            subject=email.subject,
            has_attachment="yes" if email.has_attachment else "no",
            body=email.body,
        )

    def _generated_decision(self, email: Email) -> Decision:
        text = self.generator.generate(
            self.build_prompt(email),
            temperature=self.executor_config.decision_temperature,
            max_tokens=self.executor_config.decision_max_tokens,
        )
        payload = parse_decision_json(text)

        kind = ActionKind.parse(payload.action)
        if kind is ActionKind.UNKNOWN:
            raise MalformedSynthesisOutput(f"unknown action '{payload.action}'")

        alternatives = [
            alt.value for alt in (ActionKind.parse(a) for a in payload.alternatives)
            if alt is not ActionKind.UNKNOWN and alt is not kind
        ]
        return Decision(
            agent_id=self.id,
            role=self.agent.role,
            specializations=list(self.agent.specializations),
            response=payload.reasoning,
            reasoning=payload.reasoning,
            action=kind.value,
            confidence=payload.confidence,
            alternatives=alternatives,
            impact=payload.impact,
        )

    def _heuristic_decision(self, email: Email) -> Decision:
        suggestion = suggest_action(email, self.capability_confidences(), self.agent.specializations)
        return Decision(
            agent_id=self.id,
            role=self.agent.role,
            specializations=list(self.agent.specializations),
            response=suggestion.reasoning,
            reasoning=suggestion.reasoning,
            action=suggestion.action.value,
            confidence=suggestion.confidence,
            alternatives=[k.value for k in suggestion.alternatives],
            impact=suggestion.impact,
        )

    # ---------------------------------------------------------
    # ACTING + LEARNING
    # ---------------------------------------------------------

    def execute_action(self, decision: Decision, email: Email) -> ActionResult:
        """
        Execute a decision's action if the agent is confident enough.

        Returns:
            The handler's result; RejectedResult when gated (no learning);
            FailedResult when the handler raised (learned as a failure)
        """
        kind = ActionKind.parse(decision.action)
        if kind is ActionKind.UNKNOWN:
            return RejectedResult(action=decision.action or "", reason="Unknown action")

        with self.agent.lock:
            capability = self.agent.capabilities.get(kind)
            capability_confidence = capability.confidence if capability else 0.0

        if min(decision.confidence, capability_confidence) < self.config.execution_threshold:
            logger.info(
                "Agent %s rejected %s (decision %.2f, capability %.2f)",
                self.id, kind.value, decision.confidence, capability_confidence
            )
            return RejectedResult(action=kind.value, reason="Low confidence in action")

        try:
            result = perform_action(kind, email, self.action_context)
        except Exception as e:
            logger.exception("Agent %s action %s failed", self.id, kind.value)
            result = FailedResult(action=kind.value, error=str(e))

        self.learn(decision, Outcome.SUCCESS if result.success else Outcome.FAILURE, detail={"kind": result.kind})
        return result

    def learn(self, decision: Decision, outcome: Outcome, detail: Optional[Dict[str, Any]] = None) -> float:
        new_confidence = learning_engine.record_outcome(
            self.agent,
            decision,
            outcome,
            floor=self.config.confidence_floor,
            ceiling=self.config.confidence_ceiling,
        )
        self.memory.record_outcome(self.id, decision.action, outcome, detail)
        logger.debug("Agent %s %s on %s -> %.3f", self.id, outcome.value, decision.action, new_confidence)
        return new_confidence

    def record_outcome(self, action: str, outcome: Outcome) -> float:
        """
        Apply delayed feedback for an action this agent executed earlier.

        Raises:
            ValueError: If the action is not a known action kind
        """
        kind = ActionKind.parse(action)
        if kind is ActionKind.UNKNOWN or kind not in self.agent.capabilities:
            raise ValueError(f"Unknown action: {action}")

        decision = Decision(
            agent_id=self.id,
            role=self.agent.role,
            specializations=list(self.agent.specializations),
            response="Outcome feedback",
            action=kind.value,
            confidence=self.agent.confidence,
        )
        return self.learn(decision, Outcome(outcome), detail={"source": "feedback"})

    def get_performance_metrics(self) -> Dict[str, Any]:
        with self.agent.lock:
            capabilities = {
                kind.value: {"confidence": cap.confidence, "learning_rate": cap.learning_rate}
                for kind, cap in self.agent.capabilities.items()
            }
            confidence = self.agent.confidence

        return {
            "id": self.id,
            "role": self.agent.role.value,
            "specializations": list(self.agent.specializations),
            "confidence": confidence,
            "total_decisions": self.memory.get_total_decisions(self.id),
            "success_rate": self.memory.get_success_rate(self.id),
            "capabilities": capabilities,
        }
