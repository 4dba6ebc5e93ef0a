from typing import Any, Dict, List, Optional
from swarmiq.core.config import SelectionConfig
from swarmiq.core.models import Agent, AgentRole, Task


def _context_value(context: Optional[Dict[str, Any]], *keys: str):
    if not context:
        return None
    for key in keys:
        if key in context:
            return context[key]
    return None


def tokenize(text: str) -> List[str]:
    """Lowercase whitespace tokens. No stemming."""
    return (text or "").lower().split()


class RelevanceSelector:
    def __init__(self, config: Optional[SelectionConfig] = None):
        config = config or SelectionConfig()
        self.weights = {
            "role_keyword": config.role_keyword_weight,
            "specialization_keyword": config.specialization_keyword_weight,
            "email_type": config.email_type_bonus,
            "urgency": config.urgency_bonus,
            "research": config.research_bonus,
        }

    def raw_score(self, agent: Agent, keywords: List[str], context: Optional[Dict[str, Any]] = None) -> float:
        score = 0.0

        # Keyword matching
        for keyword in keywords:
            if keyword in agent.role.value:
                score += self.weights["role_keyword"]
            if any(keyword in spec for spec in agent.specializations):
                score += self.weights["specialization_keyword"]

        # Context signals
        email_type = _context_value(context, "email_type", "emailType")
        if email_type and email_type in agent.specializations:
            score += self.weights["email_type"]
        if _context_value(context, "urgent") and agent.role == AgentRole.SCHEDULER:
            score += self.weights["urgency"]
        if _context_value(context, "needs_research", "needsResearch") and agent.role == AgentRole.RESEARCHER:
            score += self.weights["research"]

        return score

    def score(self, agent: Agent, keywords: List[str], context: Optional[Dict[str, Any]] = None) -> float:
        # Proven agents outrank equally relevant but unproven ones
        return self.raw_score(agent, keywords, context) * agent.confidence

    def select_agents(self, task: Task, pool: List[Agent]) -> List[Agent]:
        keywords = tokenize(task.description)
        ranked = sorted(
            pool,
            key=lambda agent: (-self.score(agent, keywords, task.context), agent.id)
        )
        return ranked[: min(task.required_agent_count, len(ranked))]
