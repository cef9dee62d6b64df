"""API routes for service health and data refresh."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from fastapi import APIRouter

from regulium.services.container import ComplianceServices

from ..schemas import ApiResponse

logger = logging.getLogger(__name__)

SERVICE_NAME = "Regulium Compliance Backend"


def _file_info(path: Path) -> dict[str, Any]:
    exists = path.exists()
    return {
        "path": str(path),
        "exists": exists,
        "size": path.stat().st_size if exists else 0,
    }


def create_router(services: ComplianceServices) -> APIRouter:
    """Create router with injected services."""
    router = APIRouter(tags=["system"])

    @router.get("/health")
    def health():
        """Service status, data readiness and data file diagnostics."""
        catalog = services.catalog
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "service": SERVICE_NAME,
            "dataReady": catalog.is_ready(),
            "lawsCount": len(catalog.get_laws()),
            "featuresCount": len(catalog.get_features()),
            "abbreviationsCount": len(services.glossary),
            "files": {
                "laws": _file_info(catalog.laws_path),
                "features": _file_info(catalog.features_path),
                "corrections": _file_info(services.corrections.path),
            },
        }

    @router.post("/data/refresh", response_model=ApiResponse, response_model_exclude_none=True)
    def refresh_data():
        """Reload the catalog tables and the abbreviation glossary."""
        logger.info("Data refresh requested")
        services.refresh()
        return ApiResponse(
            message="Data refreshed successfully",
            data={
                "dataReady": services.catalog.is_ready(),
                "lawsCount": len(services.catalog.get_laws()),
                "featuresCount": len(services.catalog.get_features()),
            },
        )

    return router
