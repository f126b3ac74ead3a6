from typing import List, Optional
from datetime import datetime
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session, select, func
from pydantic import BaseModel

from app.db.db import get_session
from app.models.hostel import Hostel
from app.models.item import Item
from app.models.user import User
from app.services import seller as seller_service
from app.services.hostels import reconcile_all
from app.services.lifecycle import ItemStatus, SellerStatus
from app.utils.auth_helper import require_admin
from app.utils.errors import NotFound
from app.utils.form_validator import SellerRejectRequest

router = APIRouter()


# Response Models
class OverviewStats(BaseModel):
    total_users: int
    total_sellers: int
    pending_applications: int
    available_items: int
    sold_items: int
    rented_items: int


class SellerApplication(BaseModel):
    id: int
    name: str
    email: str
    hostel_id: int
    hostel_name: str
    availability_hours: Optional[str]
    profile_description: Optional[str]
    applied_at: Optional[datetime]


class UserDetail(BaseModel):
    id: int
    name: str
    email: str
    hostel_id: int
    role: str
    seller_status: str
    is_seller: bool
    rating: float
    total_ratings: int
    items_posted: int
    created_at: datetime


def _get_user_or_404(session: Session, user_id: int) -> User:
    user = session.get(User, user_id)
    if not user:
        raise NotFound("User not found")
    return user


def _count_items(session: Session, status: str) -> int:
    return session.exec(
        select(func.count(Item.id)).where(Item.status == status)
    ).one()


@router.get("/stats", response_model=OverviewStats)
def get_overview_stats(
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    """Get overview statistics for the admin dashboard"""
    total_users = session.exec(select(func.count(User.id))).one()

    total_sellers = session.exec(
        select(func.count(User.id)).where(User.is_seller == True)  # noqa: E712
    ).one()

    pending = session.exec(
        select(func.count(User.id)).where(User.seller_status == SellerStatus.PENDING.value)
    ).one()

    return OverviewStats(
        total_users=total_users,
        total_sellers=total_sellers,
        pending_applications=pending,
        available_items=_count_items(session, ItemStatus.AVAILABLE.value),
        sold_items=_count_items(session, ItemStatus.SOLD.value),
        rented_items=_count_items(session, ItemStatus.RENTED.value),
    )


@router.get("/sellers/pending", response_model=List[SellerApplication])
def get_pending_applications(
    limit: int = Query(50, ge=1, le=100),
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    """Get seller applications waiting for review, oldest first"""
    results = session.exec(
        select(User, Hostel)
        .join(Hostel, User.hostel_id == Hostel.id)
        .where(User.seller_status == SellerStatus.PENDING.value)
        .order_by(User.seller_applied_at.asc())
        .limit(limit)
    ).all()

    return [
        SellerApplication(
            id=user.id,
            name=user.name,
            email=user.email,
            hostel_id=hostel.id,
            hostel_name=hostel.name,
            availability_hours=user.seller_availability_hours,
            profile_description=user.seller_profile_description,
            applied_at=user.seller_applied_at,
        )
        for user, hostel in results
    ]


@router.post("/sellers/{user_id}/approve")
def approve_seller_application(
    user_id: int,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    """Approve a pending seller application"""
    user = seller_service.approve_seller(session, _get_user_or_404(session, user_id))

    return {
        "ok": True,
        "message": f"Seller application of {user.name} approved",
    }


@router.post("/sellers/{user_id}/reject")
def reject_seller_application(
    user_id: int,
    payload: SellerRejectRequest,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    """Reject a pending seller application with a reason"""
    user = seller_service.reject_seller(session, _get_user_or_404(session, user_id), payload.reason)

    return {
        "ok": True,
        "message": f"Seller application of {user.name} rejected",
    }


@router.get("/users", response_model=List[UserDetail])
def get_users_for_management(
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    """Get all users with their listing counts"""
    item_counts = dict(
        session.exec(
            select(Item.seller_id, func.count(Item.id)).group_by(Item.seller_id)
        ).all()
    )

    users = session.exec(select(User).order_by(User.created_at.desc())).all()

    return [
        UserDetail(
            id=user.id,
            name=user.name,
            email=user.email,
            hostel_id=user.hostel_id,
            role=user.role,
            seller_status=user.seller_status,
            is_seller=user.is_seller,
            rating=user.rating,
            total_ratings=user.total_ratings,
            items_posted=item_counts.get(user.id, 0),
            created_at=user.created_at,
        )
        for user in users
    ]


@router.post("/hostels/reconcile")
def reconcile_hostel_counters(
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    """Recompute denormalized hostel counters from users and items"""
    count = reconcile_all(session)

    return {"ok": True, "message": f"Reconciled {count} hostels"}
