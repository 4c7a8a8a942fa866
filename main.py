"""Main application entry point for the chat relay."""

import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import ApplicationConfig, load_config
from middleware import CorrelationMiddleware, setup_exception_handlers
from routers import chat_router, health_router, metrics_router
from services import (
    AgentClient,
    CounterStore,
    GitHubClient,
    InMemoryCounterStore,
    RateLimiter,
    RedisCounterStore,
    SessionCoordinator,
    create_agent_client,
)
from utils import configure_logging, get_logger


def create_store(config: ApplicationConfig) -> CounterStore:
    if config.store_backend == "memory":
        return InMemoryCounterStore()
    return RedisCounterStore(config)


def install_services(
    app: FastAPI,
    config: ApplicationConfig,
    store: CounterStore,
    agent_client: AgentClient,
) -> None:
    """Wire the request-path services onto the application state."""
    rate_limiter = RateLimiter(config, store)
    app.state.config = config
    app.state.store = store
    app.state.agent_client = agent_client
    app.state.rate_limiter = rate_limiter
    app.state.session_coordinator = SessionCoordinator(config, store, agent_client, rate_limiter)
    app.state.start_time = time.time()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Connect the store and build the agent client for the app's lifetime."""
    config: ApplicationConfig = app.state.config
    logger = get_logger(__name__)

    store = create_store(config)
    github_client = GitHubClient(config) if config.github_token else None
    agent_client = create_agent_client(config, github_client)

    try:
        logger.info(
            "Starting services...",
            store_backend=config.store_backend,
            agent_provider=config.agent_provider,
            rate_limit_per_day=config.rate_limit_per_day,
        )
        await store.connect()
        install_services(app, config, store, agent_client)
        logger.info("All services are running.", port=config.server_port)

        yield

    finally:
        logger.info("Shutting down services...")
        await agent_client.close()
        await store.disconnect()
        logger.info("All services stopped successfully.")


def create_app(config: Optional[ApplicationConfig] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    config = config or load_config()
    configure_logging(config.log_level, json_output=config.log_json)

    app = FastAPI(
        title=config.app_name,
        description="Chat relay with a daily per-IP quota and session continuity",
        version=config.app_version,
        lifespan=lifespan,
    )
    app.state.config = config

    setup_exception_handlers(app)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
        expose_headers=[config.request_id_header],
    )
    app.add_middleware(
        CorrelationMiddleware,
        correlation_header=config.request_id_header,
        trust_proxy=config.trust_proxy,
    )
    app.include_router(health_router)
    app.include_router(metrics_router)
    app.include_router(chat_router)
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    config = app.state.config
    uvicorn.run(app, host=config.server_host, port=config.server_port)
