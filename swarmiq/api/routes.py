"""
API Routes - REST Endpoints for SwarmIQ

Provides endpoints for:
- Ad-hoc swarm tasks (fresh agent pool per request)
- Persistent roster decisions, execution and outcome feedback
- Swarm monitoring

Route handlers are sync: the engine blocks on the generator, so FastAPI
runs them on its threadpool.
"""

from fastapi import APIRouter, Depends, HTTPException, Request
from swarmiq.core.config import SwarmIQConfig
from swarmiq.core.exceptions import (
    AgentNotFound,
    EmptyPoolError,
    InvalidConfiguration,
    NoParticipantsError,
)
from swarmiq.core.models import ConsensusResult, Email, RosterDecisionResult
from swarmiq.consensus.orchestrator import SwarmOrchestrator
from swarmiq.execution.base import BaseGenerator
from swarmiq.roster.actions import ActionResult
from swarmiq.roster.swarm import PersistentSwarm
from swarmiq.api.schemas import (
    ExecuteRequest,
    OutcomeRequest,
    OutcomeResponse,
    SwarmStatusResponse,
    TaskRequest,
)


router = APIRouter(prefix="/api/v1", tags=["swarmiq"])


# ----------------------------------------------------
# Dependencies
# ----------------------------------------------------

def get_config(request: Request) -> SwarmIQConfig:
    return request.app.state.config


def get_generator(request: Request) -> BaseGenerator:
    return request.app.state.generator


def get_swarm(request: Request) -> PersistentSwarm:
    return request.app.state.swarm


def get_orchestrator(
    config: SwarmIQConfig = Depends(get_config),
    generator: BaseGenerator = Depends(get_generator)
) -> SwarmOrchestrator:
    # Fresh pool per request: no confidence state leaks between tasks
    return SwarmOrchestrator.from_config(config, generator)


# ----------------------------------------------------
# Ad-hoc swarm
# ----------------------------------------------------

@router.get("/swarm", response_model=SwarmStatusResponse)
def get_swarm_status(
    config: SwarmIQConfig = Depends(get_config),
    orchestrator: SwarmOrchestrator = Depends(get_orchestrator),
    swarm: PersistentSwarm = Depends(get_swarm)
):
    return SwarmStatusResponse(
        backend=config.executor.backend,
        model=config.executor.model,
        default_agent_count=config.swarm.default_agent_count,
        consensus_threshold=config.swarm.consensus_threshold,
        pool=orchestrator.get_swarm_status(),
        roster_agents=list(swarm.agents),
    )


@router.post("/swarm/tasks", response_model=ConsensusResult)
def submit_task(request: TaskRequest, orchestrator: SwarmOrchestrator = Depends(get_orchestrator)):
    """
    Run one task through the swarm.

    This endpoint:
    1. Selects the most relevant agents
    2. Collects, cross-validates and synthesizes their decisions
    3. Returns the consensus with alternatives and vote tally
    """
    try:
        return orchestrator.process_task(
            request.description,
            context=request.context,
            agent_count=request.agent_count,
            consensus_threshold=request.consensus_threshold,
        )
    except EmptyPoolError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except NoParticipantsError as e:
        raise HTTPException(status_code=503, detail=str(e))


# ----------------------------------------------------
# Persistent roster
# ----------------------------------------------------

@router.post("/roster/decisions", response_model=RosterDecisionResult)
def roster_decision(email: Email, swarm: PersistentSwarm = Depends(get_swarm)):
    try:
        return swarm.process_decision(email)
    except NoParticipantsError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.post("/roster/execute", response_model=ActionResult)
def roster_execute(request: ExecuteRequest, swarm: PersistentSwarm = Depends(get_swarm)):
    return swarm.execute_consensus(request.action, request.email)


@router.post("/roster/agents/{agent_id}/outcomes", response_model=OutcomeResponse)
def roster_outcome(agent_id: str, request: OutcomeRequest, swarm: PersistentSwarm = Depends(get_swarm)):
    try:
        confidence = swarm.record_outcome(agent_id, request.action, request.outcome)
    except AgentNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (ValueError, InvalidConfiguration) as e:
        raise HTTPException(status_code=400, detail=str(e))

    return OutcomeResponse(
        agent_id=agent_id,
        action=request.action,
        outcome=request.outcome,
        confidence=confidence,
    )


@router.get("/roster/metrics")
def roster_metrics(swarm: PersistentSwarm = Depends(get_swarm)):
    return swarm.get_swarm_metrics()
