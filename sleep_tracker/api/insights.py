"""Sleep analytics endpoints: chronotype, metrics and LLM insights."""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from sleep_tracker.database import get_db
from sleep_tracker.schemas.insights import ChronotypeResult, InsightsResponse, MetricsResponse
from sleep_tracker.services.chronotype import ChronotypeService
from sleep_tracker.services.insights import InsightsService
from sleep_tracker.services.llm import LLMService, get_llm_service
from sleep_tracker.services.metrics import MetricsService

router = APIRouter(prefix="/api/v1/users/{user_id}/sleep", tags=["sleep-insights"])


@router.get("/chronotype", response_model=ChronotypeResult)
def get_chronotype(
    user_id: uuid.UUID,
    window_days: int | None = Query(default=None, ge=1, le=365),
    min_sleeps: int | None = Query(default=None, ge=1, le=100),
    db: Session = Depends(get_db),
) -> ChronotypeResult:
    """Classify the user's chronotype from their median mid-sleep time."""
    return ChronotypeService(db).compute(user_id, window_days=window_days, min_sleeps=min_sleeps)


@router.get("/metrics", response_model=MetricsResponse)
def get_metrics(
    user_id: uuid.UUID,
    window_days: int | None = Query(default=None, ge=1, le=365),
    db: Session = Depends(get_db),
) -> MetricsResponse:
    """Per-sleep, per-day and derived score metrics over a window."""
    return MetricsService(db).compute(user_id, window_days=window_days)


@router.get("/insights", response_model=InsightsResponse)
async def get_insights(
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
    llm: LLMService = Depends(get_llm_service),
) -> InsightsResponse:
    """Chronotype, window metrics and an LLM-written narrative.

    Returns 503 when no LLM is configured or the LLM call fails.
    """
    return await InsightsService(db, llm).generate(user_id)
