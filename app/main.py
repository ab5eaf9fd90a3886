import logging
import sys
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from app.config import Settings
from app.db.engine import build_engine, build_session_factory, create_tables
from app.exceptions.custom import (
    CompanyNotFoundError,
    MissingWebsiteError,
    PipelineError,
)
from app.exceptions.handlers import (
    company_not_found_handler,
    missing_website_handler,
    pipeline_error_handler,
)
from app.routers.companies import router as companies_router
from app.services.claude import ClaudeService
from app.services.company_generator import CompanyGenerator
from app.services.company_intel import CompanyIntelService
from app.services.company_repository import CompanyRepository
from app.services.fetcher import WebsiteFetcher
from app.services.tech_stack import TechStackDetector

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)

    engine = build_engine(settings.database_url)
    if settings.create_tables:
        await create_tables(engine)
    session_factory = build_session_factory(engine)
    repository = CompanyRepository(session_factory)

    # AI is optional; without a key every generator call uses its fallback.
    claude: ClaudeService | None = None
    if settings.anthropic_api_key:
        claude = ClaudeService(settings.anthropic_api_key, model=settings.anthropic_model)
    generator = CompanyGenerator(claude)
    if not generator.ai_enabled:
        logger.info("ANTHROPIC_API_KEY not set, narrative generation uses fallbacks")

    try:
        async with httpx.AsyncClient(
            timeout=settings.fetch_timeout,
            max_redirects=settings.fetch_max_redirects,
        ) as client:
            fetcher = WebsiteFetcher(
                client, timeout=settings.fetch_timeout, user_agent=settings.user_agent
            )
            app.state.session_factory = session_factory
            app.state.company_repository = repository
            app.state.company_intel_service = CompanyIntelService(
                repository,
                fetcher,
                TechStackDetector(fetcher),
                generator,
            )
            yield
    finally:
        await engine.dispose()


app = FastAPI(title="Company Intel", lifespan=lifespan)

app.add_exception_handler(CompanyNotFoundError, company_not_found_handler)
app.add_exception_handler(MissingWebsiteError, missing_website_handler)
app.add_exception_handler(PipelineError, pipeline_error_handler)

app.include_router(companies_router)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
