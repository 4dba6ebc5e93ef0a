"""
FastAPI Server - REST API for SwarmIQ

Thin adapter over the two engine entry points. Everything the routes need
is built in the lifespan and kept on app.state; routes reach it through
dependencies, so tests can build an app around their own generator.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from swarmiq.core.config import SwarmIQConfig
from swarmiq.execution.base import BaseGenerator
from swarmiq.execution.factory import build_generator
from swarmiq.roster.swarm import PersistentSwarm
from swarmiq.api import routes

logger = logging.getLogger(__name__)


def create_app(
    config: Optional[SwarmIQConfig] = None,
    generator: Optional[BaseGenerator] = None
) -> FastAPI:
    """
    Build the API application.

    Args:
        config: Master configuration (default: read from the environment at startup)
        generator: Generation backend (default: built from config.executor)
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app_config = config or SwarmIQConfig.from_env()
        logging.basicConfig(
            level=app_config.api.log_level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

        app.state.config = app_config
        app.state.generator = generator or build_generator(app_config.executor)
        app.state.swarm = PersistentSwarm.from_config(
            app_config,
            generator=app.state.generator if app_config.executor.backend == "llm" else None,
        )
        logger.info(
            "SwarmIQ ready (backend=%s, roster=%d agents)",
            app_config.executor.backend, len(app.state.swarm.agents)
        )

        yield

        logger.info("Shutting down SwarmIQ")

    app = FastAPI(
        title="SwarmIQ",
        description="Agent swarm consensus engine",
        version="0.1.0",
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=(config.api.cors_origins if config else ["*"]),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def bad_input(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})

    @app.get("/")
    def root():
        return {"service": "SwarmIQ", "status": "operational"}

    @app.get("/health")
    def health(request: Request):
        swarm = request.app.state.swarm
        return {
            "status": "healthy",
            "backend": request.app.state.config.executor.backend,
            "roster_agents": len(swarm.agents),
        }

    app.include_router(routes.router)
    return app


if __name__ == "__main__":
    import uvicorn

    settings = SwarmIQConfig.from_env()
    uvicorn.run(create_app(settings), host=settings.api.host, port=settings.api.port)
