import logging

from fastapi import APIRouter

from app.dependencies import CompanyIntelDep
from app.schemas.responses import DataResponse, ErrorResponse, PipelineResult

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/companies",
    tags=["company-intel"],
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)


@router.post("/{company_id}/analyze-website", response_model=DataResponse[PipelineResult])
async def analyze_website(company_id: str, service: CompanyIntelDep) -> DataResponse[PipelineResult]:
    return DataResponse(data=await service.analyze_website(company_id))


@router.post("/{company_id}/detect-tech", response_model=DataResponse[PipelineResult])
async def detect_tech(company_id: str, service: CompanyIntelDep) -> DataResponse[PipelineResult]:
    return DataResponse(data=await service.detect_tech(company_id))


@router.post("/{company_id}/extract-services", response_model=DataResponse[PipelineResult])
async def extract_services(company_id: str, service: CompanyIntelDep) -> DataResponse[PipelineResult]:
    return DataResponse(data=await service.extract_services(company_id))


@router.post("/{company_id}/generate-description", response_model=DataResponse[PipelineResult])
async def generate_description(
    company_id: str, service: CompanyIntelDep
) -> DataResponse[PipelineResult]:
    return DataResponse(data=await service.generate_description(company_id))
