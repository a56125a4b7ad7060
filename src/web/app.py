"""
FastAPI Web Application - Welp Reputation API
==============================================

JSON API over the reputation engine: customer lookup by phone number,
review submission/edit/delete, and sharing a review to Reddit.
"""

import logging
from typing import Optional
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Query
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from src.application import ReputationService, build_service
from src.domain.errors import NotFoundError, ValidationError
from src.domain.models import ReputationProfile, Review

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# ── Globals ────────────────────────────────────────────────────────
service: Optional[ReputationService] = None


# ── Lifespan ───────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    global service
    service = build_service()
    logger.info("Reputation service ready")
    yield


app = FastAPI(title="Welp", description="Customer Reputation API", lifespan=lifespan)


def get_service() -> ReputationService:
    """Dependency hook; tests override it with a service over a temp database."""
    global service
    if service is None:
        service = build_service()
    return service


# ── Request bodies ─────────────────────────────────────────────────

class ReviewCreate(BaseModel):
    customer_phone: Optional[str] = None
    customer_name: Optional[str] = None
    business_name: Optional[str] = None
    rating: Optional[float] = None
    behavior_rating: Optional[float] = None
    payment_rating: Optional[float] = None
    maintenance_rating: Optional[float] = None
    comment: Optional[str] = None
    reviewer_role: Optional[str] = None


class ReviewUpdate(BaseModel):
    rating: Optional[float] = None
    behavior_rating: Optional[float] = None
    payment_rating: Optional[float] = None
    maintenance_rating: Optional[float] = None
    comment: Optional[str] = None
    reviewer_role: Optional[str] = None
    business_name: Optional[str] = None


# ── Serialization ──────────────────────────────────────────────────

def review_to_dict(review: Review) -> dict:
    return jsonable_encoder({
        "id": review.id,
        "customer_id": review.customer_id,
        "business_name": review.business_name,
        "rating": review.overall_rating,
        "behavior_rating": review.behavior_rating,
        "payment_rating": review.payment_rating,
        "maintenance_rating": review.maintenance_rating,
        "comment": review.comment,
        "reviewer_role": review.reviewer_role.value,
        "shared_url": review.shared_url or None,
        "created_at": review.created_at,
        "updated_at": review.updated_at,
    })


def profile_to_dict(profile: ReputationProfile) -> dict:
    return jsonable_encoder({
        "id": profile.customer_id,
        "display_id": profile.display_id,
        "overall_score": profile.overall_score,
        "behavior_score": profile.behavior_score,
        "payment_score": profile.payment_score,
        "maintenance_score": profile.maintenance_score,
        "total_reviews": profile.total_reviews,
        "is_flagged": profile.is_flagged,
        "last_review_at": profile.last_review_at,
        "recent_reviews": [
            {
                "id": r.review_id,
                "business_name": r.business_name,
                "rating": r.overall_rating,
                "comment": r.comment,
                "reviewer_role": r.reviewer_role,
                "created_at": r.created_at,
                "tags": r.tags,
            }
            for r in profile.recent_reviews
        ],
    })


def validation_error(e: ValidationError, status_code: int = 422) -> JSONResponse:
    return JSONResponse({"error": e.message, "field": e.field}, status_code=status_code)


def not_found(what: str) -> JSONResponse:
    return JSONResponse({"error": f"{what} not found"}, status_code=404)


# ── Routes ─────────────────────────────────────────────────────────

@app.get("/")
async def root():
    return {"message": "Welp reputation API running"}


@app.get("/api/customers")
def lookup_customer(phone: str = Query(""), svc: ReputationService = Depends(get_service)):
    if not phone:
        return JSONResponse({"error": "Phone number is required", "field": "phone"}, status_code=400)
    try:
        profile = svc.lookup(phone)
    except ValidationError as e:
        return validation_error(e, status_code=400)

    if profile is None:
        return not_found("Customer")
    return {"customer": profile_to_dict(profile)}


@app.get("/api/reviews")
def list_reviews(
    customer_id: Optional[int] = None,
    business_name: Optional[str] = None,
    svc: ReputationService = Depends(get_service),
):
    reviews = svc.list_reviews(customer_id=customer_id, business_name=business_name)
    return {"reviews": [review_to_dict(r) for r in reviews]}


@app.post("/api/reviews", status_code=201)
def create_review(body: ReviewCreate, svc: ReputationService = Depends(get_service)):
    try:
        review = svc.submit_review(
            phone_number=body.customer_phone,
            overall_rating=body.rating,
            reviewer_role=body.reviewer_role,
            behavior_rating=body.behavior_rating,
            payment_rating=body.payment_rating,
            maintenance_rating=body.maintenance_rating,
            comment=body.comment,
            business_name=body.business_name,
            display_name=body.customer_name,
        )
    except ValidationError as e:
        return validation_error(e)
    return {"review": review_to_dict(review)}


@app.get("/api/reviews/{review_id}")
def get_review(review_id: int, svc: ReputationService = Depends(get_service)):
    review = svc.get_review(review_id)
    if review is None:
        return not_found("Review")
    return {"review": review_to_dict(review)}


@app.put("/api/reviews/{review_id}")
def update_review(review_id: int, body: ReviewUpdate, svc: ReputationService = Depends(get_service)):
    try:
        review = svc.update_review(
            review_id,
            overall_rating=body.rating,
            behavior_rating=body.behavior_rating,
            payment_rating=body.payment_rating,
            maintenance_rating=body.maintenance_rating,
            comment=body.comment,
            reviewer_role=body.reviewer_role,
            business_name=body.business_name,
        )
    except ValidationError as e:
        return validation_error(e)
    except NotFoundError:
        return not_found("Review")
    return {"review": review_to_dict(review)}


@app.delete("/api/reviews/{review_id}")
def delete_review(review_id: int, svc: ReputationService = Depends(get_service)):
    try:
        svc.delete_review(review_id)
    except NotFoundError:
        return not_found("Review")
    return {"success": True}


@app.post("/api/reviews/{review_id}/share")
def share_review(review_id: int, svc: ReputationService = Depends(get_service)):
    try:
        result = svc.share_review(review_id)
    except NotFoundError:
        return not_found("Review")

    if not result.success:
        return JSONResponse({"success": False, "error": result.error}, status_code=502)
    return {"success": True, "url": result.url}


@app.get("/api/share/metrics")
def share_metrics(permalink: str = Query(""), svc: ReputationService = Depends(get_service)):
    if not permalink:
        return JSONResponse({"error": "permalink query param required"}, status_code=400)
    metrics = svc.post_metrics(permalink)
    if metrics is None:
        return JSONResponse({"success": False, "error": "Failed to fetch metrics"}, status_code=502)
    return {"success": True, "metrics": {"score": metrics.score, "num_comments": metrics.num_comments}}


@app.get("/api/stats")
def api_stats(svc: ReputationService = Depends(get_service)):
    return svc.get_stats()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8000)
