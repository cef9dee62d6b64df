"""API routes for the law and feature catalog.

Single Responsibility: Handle HTTP requests for catalog reads and feature creation.
Delegates to CatalogStore.
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from regulium.services.container import ComplianceServices
from regulium.services.errors import NotFoundError

from ..schemas import AddFeatureRequest, ApiResponse


def create_router(services: ComplianceServices) -> APIRouter:
    """Create router with injected services."""
    router = APIRouter(tags=["catalog"])
    catalog = services.catalog

    @router.get("/laws", response_model=ApiResponse, response_model_exclude_none=True)
    def list_laws(jurisdiction: str | None = None):
        """List laws, optionally filtered by jurisdiction (substring match)."""
        laws = catalog.laws_by_jurisdiction(jurisdiction) if jurisdiction else catalog.get_laws()
        return ApiResponse(data=[law.to_dict() for law in laws], count=len(laws))

    @router.get("/laws/{title}", response_model=ApiResponse, response_model_exclude_none=True)
    def get_law(title: str):
        law = catalog.find_law_by_title(title)
        if law is None:
            raise NotFoundError(f"Law not found: {title}")
        return ApiResponse(data=law.to_dict())

    @router.get("/features", response_model=ApiResponse, response_model_exclude_none=True)
    def list_features():
        features = catalog.get_features()
        return ApiResponse(data=[f.to_dict() for f in features], count=len(features))

    @router.get("/features/{name}", response_model=ApiResponse, response_model_exclude_none=True)
    def get_feature(name: str):
        feature = catalog.find_feature_by_name(name)
        if feature is None:
            raise NotFoundError(f"Feature not found: {name}")
        return ApiResponse(data=feature.to_dict())

    @router.post("/features", status_code=201)
    def add_feature(request: AddFeatureRequest):
        """Add a feature; 400 when the name already exists."""
        feature = catalog.append_feature(request.feature_name, request.feature_description)
        body = ApiResponse(data=feature.to_dict(), message="Feature added successfully")
        return JSONResponse(status_code=201, content=body.model_dump(exclude_none=True))

    return router
