"""Curation endpoints: allocation, backtest, scoring, pools and protocols."""

from fastapi import APIRouter, HTTPException, Depends, Query

from yieldcurator.api.schemas.request import AllocationRequest, BacktestRequest
from yieldcurator.api.schemas.response import PoolListResponse, ProtocolListResponse
from yieldcurator.api.services.curation_service import CurationService
from yieldcurator.config import Settings, get_settings
from yieldcurator.errors import UpstreamError
from yieldcurator.logger import get_logger
from yieldcurator.models.allocation import AllocationRecommendation, RecommendationPreview
from yieldcurator.models.backtest import BacktestResponse
from yieldcurator.models.pool import PoolMetrics, RiskAssessment

logger = get_logger(__name__)
router = APIRouter()


def get_curation_service(settings: Settings = Depends(get_settings)) -> CurationService:
    """Dependency to get CurationService instance."""
    return CurationService(settings)


@router.post("/allocation", response_model=AllocationRecommendation)
async def create_allocation(
    request: AllocationRequest, service: CurationService = Depends(get_curation_service)
):
    """
    Recommend a multi-pool allocation.

    - **amount**: Capital to allocate (minimum 100)
    - **riskTolerance**: conservative, moderate, or aggressive
    """
    try:
        logger.info(
            f"Received allocation request: amount={request.amount}, risk={request.risk_tolerance}"
        )
        return service.recommend(request.amount, request.risk_tolerance)

    except ValueError as e:
        logger.error(f"Validation error: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error generating allocation: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to generate allocation")


@router.get("/allocation/preview/{risk_tolerance}", response_model=RecommendationPreview)
async def get_allocation_preview(
    risk_tolerance: str, service: CurationService = Depends(get_curation_service)
):
    """Indicative APY range, pool count and risk label for a tier."""
    try:
        return service.preview(risk_tolerance)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/backtest", response_model=BacktestResponse)
async def run_backtest(
    request: BacktestRequest, service: CurationService = Depends(get_curation_service)
):
    """
    Backtest pools against their historical APY.

    - **poolIds**: 1 to 5 pool ids
    - **initialAmount**: Starting capital (default: 10000)
    - **days**: 7, 30, or 90 (default: 30)
    - **compounding**: daily, weekly, or none (default: daily)
    """
    try:
        logger.info(
            f"Received backtest request: pools={request.pool_ids}, days={request.days}, "
            f"compounding={request.compounding}"
        )
        return await service.backtest(
            pool_ids=request.pool_ids,
            initial_amount=request.initial_amount,
            days=request.days,
            compounding=request.compounding,
        )

    except ValueError as e:
        logger.error(f"Validation error: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error running backtest: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to run backtest")
    finally:
        await service.aclose()


@router.post("/score", response_model=RiskAssessment)
async def score_pool(pool: PoolMetrics, service: CurationService = Depends(get_curation_service)):
    """Score a pool's risk from its market metrics."""
    return service.score(pool)


@router.get("/pools", response_model=PoolListResponse)
async def list_pools(
    chain: str | None = None,
    stablecoin_only: bool = False,
    max_risk_score: int = 100,
    min_tvl: float = 0,
    sort_by: str = "tvl",
    limit: int = Query(100, ge=1, le=1000),
    service: CurationService = Depends(get_curation_service),
):
    """
    List live pools with risk scores.

    - **chain**: Only pools on this chain
    - **stablecoin_only**: Only stablecoin pools
    - **max_risk_score**: Drop pools scoring above this
    - **min_tvl**: Minimum TVL in USD
    - **sort_by**: tvl, apy, or risk
    - **limit**: Maximum pools returned
    """
    try:
        return await service.list_pools(
            chain=chain,
            stablecoin_only=stablecoin_only,
            max_risk_score=max_risk_score,
            min_tvl=min_tvl,
            sort_by=sort_by,
            limit=limit,
        )

    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UpstreamError as e:
        logger.error(f"Upstream error listing pools: {e}")
        raise HTTPException(status_code=502, detail=str(e))
    except Exception as e:
        logger.error(f"Error listing pools: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to list pools")
    finally:
        await service.aclose()


@router.get("/protocols", response_model=ProtocolListResponse)
async def list_protocols(service: CurationService = Depends(get_curation_service)):
    """Curated protocols with their trust scores."""
    return service.protocols()
