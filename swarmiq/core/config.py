"""
Configuration Management for SwarmIQ

Centralized configuration with environment variable support.
"""

import os
from typing import Dict, List, Optional
from pydantic import BaseModel, Field


DEFAULT_ROLE_SPECIALIZATIONS: Dict[str, List[str]] = {
    "writer": ["formal", "casual", "technical", "creative", "persuasive"],
    "analyzer": ["sentiment", "intent", "priority", "risk", "opportunity"],
    "scheduler": ["meetings", "deadlines", "reminders", "time-zones", "availability"],
    "researcher": ["context", "history", "references", "facts", "precedents"],
    "strategist": ["approach", "timing", "stakeholders", "outcomes", "alternatives"],
    "editor": ["grammar", "clarity", "tone", "structure", "impact"],
    "negotiator": ["compromise", "win-win", "escalation", "de-escalation", "alignment"],
}


class SwarmSettings(BaseModel):
    """Ad-hoc swarm configuration."""
    default_agent_count: int = 7
    consensus_threshold: float = 0.7  # advisory only
    majority_fraction: float = 0.6
    minority_threshold: float = 0.7
    max_alternatives: int = 3
    initial_confidence_min: float = 0.7
    initial_confidence_max: float = 1.0
    default_learning_rate: float = 0.02
    seed: Optional[int] = None
    role_specializations: Dict[str, List[str]] = Field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_ROLE_SPECIALIZATIONS.items()}
    )


class SelectionConfig(BaseModel):
    """Relevance selector weights."""
    role_keyword_weight: float = 2.0
    specialization_keyword_weight: float = 1.0
    email_type_bonus: float = 3.0
    urgency_bonus: float = 2.0
    research_bonus: float = 3.0


class ValidationConfig(BaseModel):
    """Cross-validation weights."""
    same_role_alignment: float = 0.8
    cross_role_alignment: float = 0.6


class ExecutorConfig(BaseModel):
    """Execution layer configuration."""
    backend: str = "deterministic"  # "deterministic" | "llm"
    model: str = "gpt-4-turbo"
    agent_timeout: float = 30.0  # seconds
    max_retries: int = 2
    max_workers: int = 8
    decision_temperature: float = 0.7
    decision_max_tokens: int = 500
    consensus_temperature: float = 0.5
    consensus_max_tokens: int = 600
    alternatives_temperature: float = 0.8
    alternatives_max_tokens: int = 400
    openai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None


class RosterConfig(BaseModel):
    """Persistent roster configuration."""
    execution_threshold: float = 0.7
    confidence_floor: float = 0.5
    confidence_ceiling: float = 1.0
    consensus_decision_confidence: float = 0.9
    delegate_address: str = "team@example.com"
    schedule_offset_days: int = 3
    followup_offset_days: int = 7


class APIConfig(BaseModel):
    """API server configuration."""
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: list = ["*"]


class SwarmIQConfig(BaseModel):
    """Master configuration for SwarmIQ."""
    swarm: SwarmSettings = SwarmSettings()
    selection: SelectionConfig = SelectionConfig()
    validation: ValidationConfig = ValidationConfig()
    executor: ExecutorConfig = ExecutorConfig()
    roster: RosterConfig = RosterConfig()
    api: APIConfig = APIConfig()

    @classmethod
    def from_env(cls) -> "SwarmIQConfig":
        """Load configuration from environment variables."""
        seed = os.getenv("SWARMIQ_SEED")
        return cls(
            swarm=SwarmSettings(
                default_agent_count=int(os.getenv("SWARMIQ_AGENT_COUNT", 7)),
                consensus_threshold=float(os.getenv("SWARMIQ_CONSENSUS_THRESHOLD", 0.7)),
                minority_threshold=float(os.getenv("SWARMIQ_MINORITY_THRESHOLD", 0.7)),
                seed=int(seed) if seed else None,
            ),
            executor=ExecutorConfig(
                backend=os.getenv("SWARMIQ_BACKEND", "deterministic"),
                model=os.getenv("SWARMIQ_MODEL", "gpt-4-turbo"),
                agent_timeout=float(os.getenv("SWARMIQ_AGENT_TIMEOUT", 30)),
                max_retries=int(os.getenv("SWARMIQ_MAX_RETRIES", 2)),
                max_workers=int(os.getenv("SWARMIQ_MAX_WORKERS", 8)),
                openai_api_key=os.getenv("OPENAI_API_KEY"),
                anthropic_api_key=os.getenv("ANTHROPIC_API_KEY"),
            ),
            roster=RosterConfig(
                execution_threshold=float(os.getenv("SWARMIQ_EXECUTION_THRESHOLD", 0.7)),
                delegate_address=os.getenv("SWARMIQ_DELEGATE_ADDRESS", "team@example.com"),
            ),
            api=APIConfig(
                host=os.getenv("API_HOST", "0.0.0.0"),
                port=int(os.getenv("API_PORT", 8000)),
                debug=os.getenv("DEBUG", "false").lower() == "true",
                log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            )
        )
