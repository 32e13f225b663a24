import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Request, status

from bodyshop.core.errors import NotFound, PermissionDenied
from bodyshop.database import get_db
from bodyshop.middleware.rbac import get_current_user, is_admin, is_staff
from bodyshop.models import bookings as booking_model
from bodyshop.models import reviews as review_model
from bodyshop.models import services as service_model
from bodyshop.schemas.reviews import (
    ReviewCreate,
    ReviewOut,
    ReviewStatus,
    ReviewStatusUpdate,
    ReviewUpdate,
)
from bodyshop.utils.audit_logger import client_ip, create_audit_log
from bodyshop.utils.pagination import Pagination, get_pagination, paginated_response

logger = logging.getLogger(__name__)

review_router = APIRouter(tags=["Reviews"])


async def _with_service_names(db, reviews: List[Dict]) -> List[ReviewOut]:
    services = await service_model.get_services_by_ids(db, {r["service_id"] for r in reviews})
    return [
        ReviewOut(**r, service_name=services.get(r["service_id"], {}).get("name"))
        for r in reviews
    ]


async def _paginated(db, pagination: Pagination, **filters):
    reviews = await review_model.find_reviews(db, pagination.limit, pagination.offset, **filters)
    total = await review_model.count_reviews(db, **filters)
    return paginated_response("reviews", await _with_service_names(db, reviews), pagination, total)


async def _own_review(db, review_id: int, user: dict, action: str) -> dict:
    review = await review_model.get_review(db, review_id)
    if not review:
        raise NotFound("Review not found")
    if review["user_id"] != user["id"]:
        raise PermissionDenied(f"You can only {action} your own reviews")
    return review


# Public: approved reviews only
@review_router.get("")
async def get_public_reviews(pagination: Pagination = Depends(get_pagination), db=Depends(get_db)):
    return await _paginated(db, pagination, status=review_model.APPROVED)


@review_router.get("/service/{service_id}")
async def get_service_reviews(
    service_id: int,
    pagination: Pagination = Depends(get_pagination),
    db=Depends(get_db),
):
    return await _paginated(db, pagination, service_id=service_id, status=review_model.APPROVED)


@review_router.get("/my-reviews")
async def get_my_reviews(
    pagination: Pagination = Depends(get_pagination),
    user=Depends(get_current_user),
    db=Depends(get_db),
):
    return await _paginated(db, pagination, user_id=user["id"])


# Staff: moderation queue
@review_router.get("/all")
async def get_all_reviews(
    status: Optional[ReviewStatus] = None,
    pagination: Pagination = Depends(get_pagination),
    staff=Depends(is_staff),
    db=Depends(get_db),
):
    return await _paginated(db, pagination, status=status)


@review_router.post("", status_code=status.HTTP_201_CREATED)
async def create_review(
    data: ReviewCreate,
    request: Request,
    user=Depends(get_current_user),
    db=Depends(get_db),
):
    if not await service_model.get_service(db, data.service_id):
        raise NotFound(f"Service with ID {data.service_id} not found")
    booking = await booking_model.get_booking(db, data.booking_id)
    if not booking:
        raise NotFound("Booking not found")
    if booking["user_id"] != user["id"]:
        raise PermissionDenied("You can only review your own bookings")

    values = {**data.model_dump(), "user_id": user["id"]}
    review = await review_model.create_review(db, values)

    await create_audit_log(
        db,
        user_id=user["id"],
        action="insert",
        table_name="reviews",
        record_id=review["id"],
        new_values=values,
        ip_address=client_ip(request),
    )
    return {
        "message": "Review submitted successfully and pending approval",
        "review": ReviewOut(**review),
    }


@review_router.put("/{review_id}")
async def update_review(
    review_id: int,
    data: ReviewUpdate,
    request: Request,
    user=Depends(get_current_user),
    db=Depends(get_db),
):
    original = await _own_review(db, review_id, user, "update")

    # edited content goes back into moderation
    changes = {**data.model_dump(exclude_unset=True, exclude_none=True), "status": "pending"}
    review = await review_model.update_review(db, review_id, changes)

    await create_audit_log(
        db,
        user_id=user["id"],
        action="update",
        table_name="reviews",
        record_id=review_id,
        old_values={key: original.get(key) for key in changes},
        new_values=changes,
        ip_address=client_ip(request),
    )
    return {"message": "Review updated successfully and pending approval", "review": ReviewOut(**review)}


@review_router.delete("/{review_id}")
async def delete_review(review_id: int, request: Request, user=Depends(get_current_user), db=Depends(get_db)):
    review = await _own_review(db, review_id, user, "delete")
    await review_model.delete_review(db, review_id)

    await create_audit_log(
        db,
        user_id=user["id"],
        action="delete",
        table_name="reviews",
        record_id=review_id,
        old_values={k: review.get(k) for k in ("service_id", "booking_id", "rating", "comment", "status")},
        ip_address=client_ip(request),
    )
    return {"message": "Review deleted successfully"}


@review_router.put("/{review_id}/status")
async def update_review_status(
    review_id: int,
    data: ReviewStatusUpdate,
    request: Request,
    staff=Depends(is_staff),
    db=Depends(get_db),
):
    original = await review_model.get_review(db, review_id)
    if not original:
        raise NotFound("Review not found")

    review = await review_model.update_review(db, review_id, {"status": data.status})
    await create_audit_log(
        db,
        user_id=staff["id"],
        action="update",
        table_name="reviews",
        record_id=review_id,
        old_values={"status": original["status"]},
        new_values={"status": data.status},
        ip_address=client_ip(request),
    )
    logger.info("Review %s %s -> %s by user %s", review_id, original["status"], data.status, staff["id"])
    return {"message": f"Review status updated to {data.status}", "review": ReviewOut(**review)}


@review_router.delete("/{review_id}/admin")
async def admin_delete_review(review_id: int, request: Request, admin=Depends(is_admin), db=Depends(get_db)):
    review = await review_model.get_review(db, review_id)
    if not review:
        raise NotFound("Review not found")
    await review_model.delete_review(db, review_id)

    await create_audit_log(
        db,
        user_id=admin["id"],
        action="delete",
        table_name="reviews",
        record_id=review_id,
        old_values={k: review.get(k) for k in ("user_id", "service_id", "rating", "comment", "status")},
        ip_address=client_ip(request),
        metadata={"admin_deletion": True},
    )
    return {"message": "Review deleted successfully by admin"}
