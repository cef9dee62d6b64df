"""API routes for feedback and corrections.

Single Responsibility: Handle HTTP requests for feedback CRUD.
Delegates to CorrectionStore; a zero match count becomes 404 here.
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from regulium.services.container import ComplianceServices
from regulium.services.errors import NotFoundError

from ..schemas import ApiResponse, FeedbackRequest, StatusUpdateRequest


def create_router(services: ComplianceServices) -> APIRouter:
    """Create router with injected services."""
    router = APIRouter(prefix="/feedback", tags=["feedback"])
    store = services.corrections

    @router.post("", status_code=201)
    def submit_feedback(request: FeedbackRequest):
        correction = store.submit(
            feature_name=request.feature_name,
            law_title=request.law_title,
            kind=request.feedback_type,
            message=request.message,
            contact=request.user_email,
        )
        body = ApiResponse(
            data={"feedback_id": correction.id, **correction.to_dict()},
            message="Feedback submitted successfully",
        )
        return JSONResponse(status_code=201, content=body.model_dump(exclude_none=True))

    @router.get("", response_model=ApiResponse, response_model_exclude_none=True)
    def list_feedback():
        items = store.list_all()
        return ApiResponse(data=[c.to_dict() for c in items], count=len(items))

    @router.get("/feature/{name}", response_model=ApiResponse, response_model_exclude_none=True)
    def corrections_for_feature(name: str):
        items = store.list_by_feature(name)
        return ApiResponse(data=[c.to_dict() for c in items], count=len(items))

    @router.get("/law/{title}", response_model=ApiResponse, response_model_exclude_none=True)
    def corrections_for_law(title: str):
        items = store.list_by_law(title)
        return ApiResponse(data=[c.to_dict() for c in items], count=len(items))

    @router.patch("/{feedback_id}/status", response_model=ApiResponse, response_model_exclude_none=True)
    def update_status(feedback_id: str, request: StatusUpdateRequest):
        if store.set_status(feedback_id, request.status) == 0:
            raise NotFoundError(f"Feedback not found: {feedback_id}")
        return ApiResponse(message="Status updated successfully")

    @router.delete("/{feedback_id}", response_model=ApiResponse, response_model_exclude_none=True)
    def delete_feedback(feedback_id: str):
        if store.delete(feedback_id) == 0:
            raise NotFoundError(f"Feedback not found: {feedback_id}")
        return ApiResponse(message="Feedback deleted successfully")

    return router
