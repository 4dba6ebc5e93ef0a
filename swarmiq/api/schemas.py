"""
API Schemas - Request/Response Models

Pydantic models for API validation and documentation.
"""

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from swarmiq.core.models import Email, Outcome


class TaskRequest(BaseModel):
    """Ad-hoc task for the swarm."""
    description: str = Field(..., min_length=1, description="What the swarm should decide")
    context: Dict[str, Any] = Field(default_factory=dict, description="Task context (email_type, urgent, ...)")
    agent_count: Optional[int] = Field(None, ge=0, description="Agents to select (default from config)")
    consensus_threshold: Optional[float] = Field(None, ge=0.0, le=1.0, description="Advisory threshold")


class ExecuteRequest(BaseModel):
    """Execute a consensus action on an e-mail."""
    action: str = Field(..., min_length=1)
    email: Email


class OutcomeRequest(BaseModel):
    """Delayed feedback on an executed action."""
    action: str = Field(..., min_length=1)
    outcome: Outcome


class OutcomeResponse(BaseModel):
    agent_id: str
    action: str
    outcome: Outcome
    confidence: float


class SwarmStatusResponse(BaseModel):
    """Engine configuration and pool overview."""
    backend: str
    model: str
    default_agent_count: int
    consensus_threshold: float
    pool: Dict[str, Any]
    roster_agents: List[str]
