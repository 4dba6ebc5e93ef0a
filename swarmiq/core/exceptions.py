"""
Custom Exceptions for SwarmIQ

Provides specific exception types for different failure modes.
"""


class SwarmError(Exception):
    """Base exception for all SwarmIQ errors."""
    pass


class AgentCallFailure(SwarmError):
    """
    Raised when the text-generation collaborator fails or times out for one agent.

    Recovered locally: the agent is dropped from the current task.
    """

    def __init__(self, message: str, agent_id: str = None):
        super().__init__(message)
        self.agent_id = agent_id


class NoParticipantsError(SwarmError):
    """Raised when every selected agent failed its collaborator call."""
    pass


class EmptyPoolError(SwarmError):
    """Raised when agent selection yields zero agents (misconfiguration)."""
    pass


class MalformedSynthesisOutput(SwarmError):
    """
    Raised when a synthesis call returns text that cannot be used.

    Never reaches the caller: consensus falls back to the best single
    decision, alternatives fall back to an empty list.
    """
    pass


class InvalidConfiguration(SwarmError):
    """Raised when configuration is invalid or missing required values."""
    pass


class ConfidenceInvalid(SwarmError):
    """Raised when a confidence score is out of valid range [0.0, 1.0]."""
    pass


class AgentNotFound(SwarmError):
    """Raised when an agent id is not registered."""
    pass
