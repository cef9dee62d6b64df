"""API routes for compliance checks.

Single Responsibility: Translate check requests into aggregator calls.
Both handlers are sync so FastAPI runs the blocking model calls in its threadpool.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter

from regulium.engine.types import EvaluationOptions
from regulium.services.container import ComplianceServices

from ..schemas import ApiResponse, CheckFeatureRequest, ComplianceCheckRequest, EvaluationSwitches

logger = logging.getLogger(__name__)


def _options(request: EvaluationSwitches) -> EvaluationOptions:
    return EvaluationOptions(
        include_corrections=request.include_corrections,
        include_abbreviations=request.include_abbreviations,
    )


def create_router(services: ComplianceServices) -> APIRouter:
    """Create router with injected services."""
    router = APIRouter(prefix="/compliance", tags=["compliance"])
    aggregator = services.aggregator

    @router.post("/check", response_model=ApiResponse, response_model_exclude_none=True)
    def check_compliance(request: ComplianceCheckRequest):
        """Explicit mode: evaluate the chosen features against the chosen laws."""
        report = aggregator.check_compliance(
            feature_names=request.features,
            law_titles=request.laws,
            options=_options(request),
        )
        return ApiResponse(data=report.to_dict())

    @router.post("/check-feature", response_model=ApiResponse, response_model_exclude_none=True)
    def check_feature(request: CheckFeatureRequest):
        """Discovery mode: screen the catalog, then evaluate the relevant laws."""
        logger.info("Discovery check requested for '%s'", request.feature_name)
        report = aggregator.check_feature(
            request.feature_name,
            request.feature_description,
            options=_options(request),
        )
        return ApiResponse(data=report.to_dict())

    return router
