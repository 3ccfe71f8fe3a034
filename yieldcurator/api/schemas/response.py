"""API response models."""

from pydantic import BaseModel, Field
from typing import List

from yieldcurator.models.analytics import YieldBreakdown
from yieldcurator.models.pool import PoolMetrics, RiskAssessment
from yieldcurator.models.protocol import ProtocolTrust


class ScoredPool(BaseModel):
    """Live pool metrics with their risk assessment."""

    pool: PoolMetrics
    assessment: RiskAssessment
    yield_breakdown: YieldBreakdown


class PoolListResponse(BaseModel):
    """Response model for the scored pool listing."""

    pools: List[ScoredPool] = Field(..., description="Pools matching the filters")
    total_count: int = Field(..., description="Number of pools matching before the limit")


class ProtocolListResponse(BaseModel):
    """Response model for the protocol registry listing."""

    protocols: List[ProtocolTrust] = Field(..., description="Registered protocols by trust score")
    count: int


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(..., description="Health status")
    version: str = Field(default="1.0.0", description="API version")
