"""API Container (composition root state holder).

This module only defines types/structure for objects created in the real
composition root (`src/interfaces/api/main.py`).
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from sqlalchemy.orm import Session

from src.application.services.active_session_store import ActiveSessionStore
from src.application.services.event_source_provisioner import EventSourceProvisioner
from src.application.services.output_schema_calculator import OutputSchemaCalculator
from src.application.services.run_dispatcher import RunDispatcher
from src.domain.ports.integration_client import IntegrationClientFactory
from src.domain.ports.workflow_event_repository import WorkflowEventRepository
from src.domain.ports.workflow_repository import WorkflowRepository
from src.domain.ports.workflow_run_repository import WorkflowRunRepository
from src.domain.ports.workflow_session_repository import WorkflowSessionRepository
from src.infrastructure.auth.integration_token import WorkspaceCredentials


@dataclass(frozen=True, slots=True)
class ApiContainer:
    """Typed container attached to `app.state.container`."""

    session_factory: Callable[[], Session]

    workflow_repository: Callable[[Session], WorkflowRepository]
    run_repository: Callable[[Session], WorkflowRunRepository]
    event_repository: Callable[[Session], WorkflowEventRepository]
    session_repository: Callable[[Session], WorkflowSessionRepository]

    integration_client_factory: IntegrationClientFactory
    schema_calculator: OutputSchemaCalculator
    event_source_provisioner: EventSourceProvisioner
    run_dispatcher: RunDispatcher
    active_sessions: ActiveSessionStore

    # Defaults used when the caller does not send its own workspace headers.
    default_credentials: WorkspaceCredentials
    integration_token_ttl_seconds: int
    verification_secret: str
