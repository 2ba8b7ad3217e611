"""FastAPI 应用入口"""

import logging
from collections.abc import AsyncGenerator, Callable
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from src.application.services.active_session_store import ActiveSessionStore
from src.application.services.durable_step_runtime import DurableStepRuntime
from src.application.services.event_source_provisioner import EventSourceProvisioner
from src.application.services.node_execution_service import NodeExecutionService
from src.application.services.output_schema_calculator import OutputSchemaCalculator
from src.application.services.run_dispatcher import RunDispatcher
from src.application.services.workflow_run_orchestrator import WorkflowRunOrchestrator
from src.config import settings
from src.domain.ports.integration_client import IntegrationClientFactory
from src.domain.ports.llm_port import LLMPort
from src.domain.ports.step_result_store import StepResultStore
from src.infrastructure.adapters import (
    InMemoryStepResultStore,
    create_integration_client_factory,
)
from src.infrastructure.auth.integration_token import WorkspaceCredentials
from src.infrastructure.database.engine import SessionLocal
from src.infrastructure.database.repositories import (
    SQLAlchemyStepResultStore,
    SQLAlchemyWorkflowEventRepository,
    SQLAlchemyWorkflowRepository,
    SQLAlchemyWorkflowRunRepository,
    SQLAlchemyWorkflowSessionRepository,
)
from src.infrastructure.database.schema import ensure_sqlite_schema
from src.infrastructure.executors import create_executor_registry
from src.infrastructure.llm import LangChainLLM
from src.interfaces.api.container import ApiContainer
from src.interfaces.api.routes import ingest_event, node_types, runs, sessions, workflows

logger = logging.getLogger(__name__)

ContainerFactory = Callable[[], ApiContainer]


def _create_session() -> Session:
    return SessionLocal()


def _default_llm() -> LLMPort | None:
    if not settings.openai_api_key:
        return None
    return LangChainLLM(
        api_key=settings.openai_api_key,
        model=settings.openai_model,
        base_url=settings.openai_base_url,
    )


def _default_step_store(session_factory: Callable[[], Session]) -> StepResultStore:
    if settings.step_memo_backend == "memory":
        return InMemoryStepResultStore()
    return SQLAlchemyStepResultStore(session_factory)


def build_container(
    *,
    session_factory: Callable[[], Session] = _create_session,
    integration_client_factory: IntegrationClientFactory | None = None,
    llm: LLMPort | None = None,
    step_store: StepResultStore | None = None,
) -> ApiContainer:
    """组装运行时对象图

    参数都可以替换，测试用内存 SQLite、假的集成平台客户端和内存步骤存储。
    """
    client_factory = integration_client_factory or create_integration_client_factory(
        api_uri=settings.integration_api_uri,
        connector_api_uri=settings.connector_api_uri,
        timeout=settings.integration_request_timeout,
    )

    def workflow_repository(session: Session) -> SQLAlchemyWorkflowRepository:
        return SQLAlchemyWorkflowRepository(session)

    def run_repository(session: Session) -> SQLAlchemyWorkflowRunRepository:
        return SQLAlchemyWorkflowRunRepository(session)

    def event_repository(session: Session) -> SQLAlchemyWorkflowEventRepository:
        return SQLAlchemyWorkflowEventRepository(session)

    def session_repository(session: Session) -> SQLAlchemyWorkflowSessionRepository:
        return SQLAlchemyWorkflowSessionRepository(session)

    registry = create_executor_registry(
        client_factory=client_factory,
        llm=llm,
        http_timeout=settings.http_node_timeout,
    )
    orchestrator = WorkflowRunOrchestrator(
        session_factory=session_factory,
        workflow_repository_factory=workflow_repository,
        run_repository_factory=run_repository,
        node_execution=NodeExecutionService(registry=registry),
        step_runtime=DurableStepRuntime(
            store=step_store or _default_step_store(session_factory),
            max_attempts=settings.workflow_max_attempts,
        ),
    )
    dispatcher = RunDispatcher(
        execute=orchestrator.execute,
        session_factory=session_factory,
        run_repository_factory=run_repository,
    )

    return ApiContainer(
        session_factory=session_factory,
        workflow_repository=workflow_repository,
        run_repository=run_repository,
        event_repository=event_repository,
        session_repository=session_repository,
        integration_client_factory=client_factory,
        schema_calculator=OutputSchemaCalculator(client_factory=client_factory),
        event_source_provisioner=EventSourceProvisioner(
            client_factory=client_factory,
            host_name=settings.app_host_name,
            verification_secret=settings.workflow_event_verification_secret,
        ),
        run_dispatcher=dispatcher,
        active_sessions=ActiveSessionStore(ttl=timedelta(seconds=settings.session_ttl_seconds)),
        default_credentials=WorkspaceCredentials(
            workspace_key=settings.workspace_key or None,
            workspace_secret=settings.workspace_secret or None,
        ),
        integration_token_ttl_seconds=settings.integration_token_ttl_seconds,
        verification_secret=settings.workflow_event_verification_secret,
    )


def _default_container() -> ApiContainer:
    return build_container(llm=_default_llm())


def _get_display_host() -> str:
    """Return a host suitable for displaying in links."""
    if settings.host in {"0.0.0.0", "::"}:
        return "127.0.0.1"
    return settings.host


def create_app(container_factory: ContainerFactory = _default_container) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logging.basicConfig(level=settings.log_level.upper())
        logger.info(
            "application_starting",
            extra={
                "app_name": settings.app_name,
                "version": settings.app_version,
                "env": settings.env,
                "url": f"http://{_get_display_host()}:{settings.port}",
            },
        )

        try:
            ensure_sqlite_schema()
        except Exception as exc:  # pragma: no cover - best effort startup helper
            logger.warning("database_schema_init_failed", extra={"error": str(exc)})

        app.state.container = container_factory()

        try:
            yield
        finally:
            container: ApiContainer = app.state.container
            if container.run_dispatcher.pending:
                logger.info(
                    "waiting_for_workflow_runs",
                    extra={"pending": container.run_dispatcher.pending},
                )
            await container.run_dispatcher.drain()
            logger.info("application_stopped", extra={"app_name": settings.app_name})

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="顺序节点工作流执行引擎",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", tags=["Health"])
    async def health_check() -> JSONResponse:
        return JSONResponse(
            content={
                "status": "healthy",
                "app_name": settings.app_name,
                "version": settings.app_version,
                "env": settings.env,
            }
        )

    @app.get("/", tags=["Root"])
    async def root() -> JSONResponse:
        return JSONResponse(
            content={
                "message": f"欢迎使用 {settings.app_name}",
                "version": settings.app_version,
                "docs": f"http://{_get_display_host()}:{settings.port}/docs",
            }
        )

    # /workflows/runs 必须先于 /workflows/{workflow_id} 注册
    app.include_router(runs.router, prefix="/api", tags=["Runs"])
    app.include_router(workflows.router, prefix="/api", tags=["Workflows"])
    app.include_router(ingest_event.router, prefix="/api", tags=["Event Ingestion"])
    app.include_router(sessions.router, prefix="/api", tags=["Sessions"])
    app.include_router(node_types.router, prefix="/api", tags=["Node Types"])

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.interfaces.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower(),
    )
