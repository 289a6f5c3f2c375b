from __future__ import annotations

# Standard library
import os
import logging as _logging
from contextlib import asynccontextmanager
from typing import Final, Any

# Third-party
from dotenv import load_dotenv
from fastapi import FastAPI
from strawberry.fastapi import GraphQLRouter

load_dotenv()

# Local application imports
from api.context import create_context  # noqa: E402
from api.schema import create_schema  # noqa: E402
from application.subscription.concurrency import SubscriptionMutator  # noqa: E402
from application.subscription.event_handlers import NotificationEventHandler  # noqa: E402
from application.subscription.orchestrators import ArtifactOrchestrator  # noqa: E402
from domain.subscription.delegation import DelegationGenerator  # noqa: E402
from domain.subscription.lifecycle import LifecycleStateMachine  # noqa: E402
from domain.subscription.progression import ProgressionTracker  # noqa: E402
from domain.subscription.snapshot import SnapshotCompiler  # noqa: E402
from infrastructure.catalog.factory import get_catalog_reader  # noqa: E402
from infrastructure.config import get_notification_timeout  # noqa: E402
from infrastructure.events.in_memory_bus import InMemoryEventBus  # noqa: E402
from infrastructure.locking import SubscriptionLockRegistry  # noqa: E402
from infrastructure.notifications.factory import create_notification_sender  # noqa: E402
from infrastructure.persistence.factory import (  # noqa: E402
    get_delegation_repository,
    get_subscription_repository,
    reset_repositories,
)
from infrastructure.retry_queue import InMemoryArtifactRetryQueue  # noqa: E402

# --- Basic logging configuration (minimal) ---
_LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
_logging.basicConfig(
    level=getattr(_logging, _LOG_LEVEL, _logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

# Version from env (Docker build ARG -> ENV APP_VERSION)
APP_VERSION = os.getenv("APP_VERSION", "0.0.0-dev")


# ============================================
# Dependency wiring (built once per process)
# ============================================

_event_bus = InMemoryEventBus()
_subscription_repository = get_subscription_repository()
_delegation_repository = get_delegation_repository()
_retry_queue = InMemoryArtifactRetryQueue()
_lock_registry = SubscriptionLockRegistry()
_tracker = ProgressionTracker()
_state_machine = LifecycleStateMachine()
_catalog_reader = get_catalog_reader()
_notification_sender = create_notification_sender()

_mutator = SubscriptionMutator(
    subscriptions=_subscription_repository,
    locks=_lock_registry,
    event_bus=_event_bus,
)
_artifact_orchestrator = ArtifactOrchestrator(
    compiler=SnapshotCompiler(_catalog_reader),
    generator=DelegationGenerator(),
    tracker=_tracker,
    delegations=_delegation_repository,
    retry_queue=_retry_queue,
)

_notification_handler = NotificationEventHandler(
    sender=_notification_sender, timeout_s=get_notification_timeout()
)
_notification_handler.register(_event_bus)

schema = create_schema()

__all__: list[str] = ["app"]


@asynccontextmanager
async def lifespan(_: FastAPI) -> Any:  # pragma: no cover
    """Application lifecycle: log configuration, then release HTTP and DB clients."""
    logger = _logging.getLogger("startup")
    logger.info(
        "lifespan.startup",
        extra={
            "repository": type(_subscription_repository).__name__,
            "catalog": type(_catalog_reader).__name__,
            "notifications": type(_notification_sender).__name__,
            "version": APP_VERSION,
        },
    )
    logger.info("lifespan.ready", extra={"status": "serving"})
    try:
        yield
    finally:
        logger.info("lifespan.shutdown", extra={"status": "cleanup"})
        for client in (_catalog_reader, _notification_sender):
            close = getattr(client, "close", None)
            if close is not None:
                await close()
        reset_repositories()


app = FastAPI(
    title="Meal Subscription Service",
    version=APP_VERSION,
    lifespan=lifespan,
)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/version")
async def version() -> dict[str, str]:
    return {"version": APP_VERSION}


# ============================================
# GraphQL Context Setup
# ============================================


def get_graphql_context() -> Any:
    """Create GraphQL context with the process-wide dependencies."""
    return create_context(
        subscription_repository=_subscription_repository,
        delegation_repository=_delegation_repository,
        event_bus=_event_bus,
        mutator=_mutator,
        artifact_orchestrator=_artifact_orchestrator,
        progression_tracker=_tracker,
        state_machine=_state_machine,
        retry_queue=_retry_queue,
    )


graphql_app: Final[GraphQLRouter[Any, Any]] = GraphQLRouter(
    schema, context_getter=get_graphql_context
)
app.include_router(graphql_app, prefix="/graphql")
