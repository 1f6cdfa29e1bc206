from typing import Optional
from pydantic import BaseModel, Field


class CoreOutput(BaseModel):
    """Uniform result of every service operation."""
    ok: bool
    error: Optional[str] = None


class PaginationInput(BaseModel):
    page: int = Field(1, ge=1)


class PaginationOutput(CoreOutput):
    total_pages: Optional[int] = None
    total_results: Optional[int] = None
