import threading
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from swarmiq.core.exceptions import ConfidenceInvalid


class AgentRole(str, Enum):
    WRITER = "writer"
    ANALYZER = "analyzer"
    SCHEDULER = "scheduler"
    RESEARCHER = "researcher"
    STRATEGIST = "strategist"
    EDITOR = "editor"
    NEGOTIATOR = "negotiator"


class Impact(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Outcome(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


class ActionKind(str, Enum):
    """Closed set of roster actions. UNKNOWN stands in for anything else."""
    CATEGORIZE = "categorize"
    PRIORITIZE = "prioritize"
    RESPOND = "respond"
    SCHEDULE = "schedule"
    EXTRACT = "extract"
    FOLLOWUP = "followup"
    FILTER = "filter"
    DELEGATE = "delegate"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Optional[str]) -> "ActionKind":
        if isinstance(value, ActionKind):
            return value
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.UNKNOWN

    @classmethod
    def known(cls) -> List["ActionKind"]:
        return [kind for kind in cls if kind is not cls.UNKNOWN]


class Capability(BaseModel):
    name: ActionKind
    description: str = ""
    confidence: float = Field(..., ge=0.0, le=1.0)
    learning_rate: float = Field(..., gt=0.0, le=1.0)


class Agent(BaseModel):
    id: str
    role: AgentRole
    specializations: List[str]
    confidence: float = Field(..., ge=0.0, le=1.0)
    learning_rate: float = Field(0.02, gt=0.0, le=1.0)
    capabilities: Dict[ActionKind, Capability] = Field(default_factory=dict)

    # Single-writer discipline for confidence updates
    _lock: Any = PrivateAttr(default_factory=threading.RLock)

    @field_validator("specializations")
    @classmethod
    def _dedupe_specializations(cls, value: List[str]) -> List[str]:
        seen = []
        for tag in value:
            tag = tag.strip()
            if tag and tag not in seen:
                seen.append(tag)
        if not seen:
            raise ValueError("agent needs at least one specialization")
        return seen

    @property
    def primary_specialization(self) -> str:
        return self.specializations[0]

    def set_confidence(self, value: float) -> float:
        if not 0.0 <= value <= 1.0:
            raise ConfidenceInvalid(f"Confidence must be in [0.0, 1.0], got {value}")
        with self._lock:
            self.confidence = value
        return value

    def set_capability_confidence(self, kind: ActionKind, value: float) -> float:
        """Update one capability and re-derive the agent's overall confidence."""
        if not 0.0 <= value <= 1.0:
            raise ConfidenceInvalid(f"Confidence must be in [0.0, 1.0], got {value}")
        with self._lock:
            self.capabilities[kind].confidence = value
            scores = [c.confidence for c in self.capabilities.values()]
            self.confidence = min(1.0, sum(scores) / len(scores))
        return value

    @property
    def lock(self):
        return self._lock


class Task(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex[:9])
    description: str
    context: Dict[str, Any] = Field(default_factory=dict)
    required_agent_count: int = Field(7, ge=0)
    consensus_threshold: float = Field(0.7, ge=0.0, le=1.0)


class Decision(BaseModel):
    model_config = ConfigDict(frozen=True)

    agent_id: str
    role: AgentRole
    specializations: List[str]
    response: str
    reasoning: str = ""
    action: Optional[str] = None
    confidence: float = Field(..., ge=0.0, le=1.0)
    alternatives: List[str] = Field(default_factory=list)
    impact: Impact = Impact.MEDIUM
    vote: Optional[float] = None

    @property
    def primary_specialization(self) -> str:
        return self.specializations[0] if self.specializations else ""

    @property
    def text(self) -> str:
        return self.response or self.reasoning


class VoteTally(BaseModel):
    option: str
    vote_count: int
    weight: float


class ConsensusResult(BaseModel):
    task_id: str
    consensus: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    agent_decisions: List[Decision]
    alternatives: List[str] = Field(default_factory=list, max_length=3)
    reasoning: str
    voting_results: List[VoteTally]
    degraded: bool = False
    failed_agents: List[str] = Field(default_factory=list)
    meets_threshold: bool = True
    processed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class Email(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex[:9])
    sender: str = ""
    subject: str = ""
    body: str = ""
    has_attachment: bool = False
    timestamp: Optional[datetime] = None

    @property
    def text(self) -> str:
        return f"{self.subject}\n{self.body}"


class RosterDecisionResult(BaseModel):
    decisions: List[Decision]
    consensus: str
    confidence: float = Field(..., ge=0.0, le=1.0)
