import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from expense_categorizer.api.errors import register_error_handlers
from expense_categorizer.api.routes import categorize, health, review
from expense_categorizer.classifiers.base import Classifier
from expense_categorizer.classifiers.llm import ClassifierConfig, LLMClassifier
from expense_categorizer.core import settings
from expense_categorizer.db.session import create_engine, create_schema, create_session_factory
from expense_categorizer.logger import get_logger, setup_logging
from expense_categorizer.services.audit import AuditRecorder
from expense_categorizer.services.categorization import CategorizationPipeline
from expense_categorizer.services.leases import OwnerLeases
from expense_categorizer.services.reconciliation import ReconciliationEngine
from expense_categorizer.services.review_actions import ReviewActions
from expense_categorizer.services.review_queue import ReviewQueue
from expense_categorizer.services.seeding import seed_default_categories
from expense_categorizer.services.selection import CandidateSelector

logger = get_logger(__name__)


def build_classifier() -> Classifier | None:
    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        logger.warning("OPENAI_API_KEY not found. AI categorization will fail until it is configured.")
        return None
    config = ClassifierConfig.from_env()
    base_url = os.getenv("OPENAI_BASE_URL")
    logger.info("LLM classifier enabled: model=%s, base_url=%s", config.model, base_url or "default")
    return LLMClassifier(api_key=api_key, config=config, base_url=base_url)


def install_services(
    app: FastAPI,
    session_factory: async_sessionmaker[AsyncSession],
    classifier: Classifier | None,
) -> None:
    app.state.pipeline = CategorizationPipeline(
        selector=CandidateSelector(session_factory),
        classifier=classifier,
        audit=AuditRecorder(session_factory),
        engine=ReconciliationEngine(session_factory),
        leases=OwnerLeases(),
    )
    app.state.review_queue = ReviewQueue(session_factory)
    app.state.review_actions = ReviewActions(session_factory)


def create_app() -> FastAPI:
    setup_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("Initializing services...")
        settings.log_environment()

        engine = create_engine(settings.database_url(), echo=settings.db_echo())
        await create_schema(engine)
        session_factory = create_session_factory(engine)
        if settings.seed_categories_enabled():
            await seed_default_categories(session_factory)

        install_services(app, session_factory, build_classifier())

        logger.info("Services initialized.")
        yield
        logger.info("Service shutting down.")
        await engine.dispose()

    app = FastAPI(title="Expense Categorizer", lifespan=lifespan)
    register_error_handlers(app)

    app.include_router(health.router)
    app.include_router(categorize.router)
    app.include_router(review.router)

    return app


app = create_app()
