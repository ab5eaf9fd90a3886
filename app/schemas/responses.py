from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel

from app.schemas.company import CompanyProfile

T = TypeVar("T")


class PipelineResult(BaseModel):
    company: CompanyProfile
    contacts_added: int = 0
    services_added: int = 0
    website_system: str | None = None


class DataResponse(BaseModel, Generic[T]):
    data: T


class ErrorResponse(BaseModel):
    error: str
    details: str | None = None
