# src/spec_factory/api/schemas.py
"""
Pydantic request/response models for the design API.

Separated from designs.py to keep route handlers concise.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from ..ai_pipeline.schemas import ProductType


class DesignRequestAPI(BaseModel):
    """API request to generate a design packet."""

    description: str
    product_type: ProductType


class DesignJobResponse(BaseModel):
    """Response with job ID for tracking."""

    job_id: str
    status: str


class DesignStatusResponse(BaseModel):
    """Status of a design job."""

    job_id: str
    status: str  # "queued", then GenerationStatus values
    design_id: str | None = None
    result: dict[str, Any] | None = None
    error: str | None = None


class RecentDesignSummary(BaseModel):
    """Card shown in the recent productions grid."""

    id: str
    date: str
    product_name: str
    type: str
