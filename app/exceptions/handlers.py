import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from .custom import CompanyNotFoundError, MissingWebsiteError, PipelineError

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str, details: str | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": message, "details": details},
    )


async def company_not_found_handler(_request: Request, exc: CompanyNotFoundError) -> JSONResponse:
    logger.warning("Company %s not found", exc.company_id)
    return _error(404, exc.message)


async def missing_website_handler(_request: Request, exc: MissingWebsiteError) -> JSONResponse:
    logger.warning("Company %s has no website", exc.company_id)
    return _error(400, exc.message)


async def pipeline_error_handler(_request: Request, exc: PipelineError) -> JSONResponse:
    logger.error("Pipeline error: %s (%s)", exc.message, exc.details)
    return _error(500, exc.message, exc.details)
