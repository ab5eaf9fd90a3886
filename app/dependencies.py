from typing import Annotated

from fastapi import Depends, Request

from app.services.company_intel import CompanyIntelService


def get_company_intel_service(request: Request) -> CompanyIntelService:
    return request.app.state.company_intel_service


CompanyIntelDep = Annotated[CompanyIntelService, Depends(get_company_intel_service)]
