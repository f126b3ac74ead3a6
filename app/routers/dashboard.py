import uuid
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session, func, or_, select

from app.db.db import get_session
from app.models.hostel import Hostel
from app.models.interest import ItemInterest
from app.models.item import Item
from app.models.user import User
from app.services import transactions
from app.services.lifecycle import ItemStatus
from app.utils.auth_helper import load_owned, require_seller
from app.utils.pagination import MAX_PAGE_SIZE, build_pagination, page_offset
from app.utils.serializers import serialize_item


router = APIRouter()

TRANSACTION_WINDOW_DAYS = 183
RECENT_ACTIVITY_LIMIT = 10


def _count(session: Session, *conditions) -> int:
    return session.exec(
        select(func.count()).select_from(Item).where(*conditions)
    ).one()


@router.get("/analytics")
async def get_analytics(
    session: Session = Depends(get_session),
    seller: User = Depends(require_seller),
):
    """Listing, transaction and interest analytics for the calling seller"""
    mine = Item.seller_id == seller.id

    total_listings = _count(session, mine)
    active_listings = _count(session, mine, Item.status == ItemStatus.AVAILABLE.value, Item.is_active == True)  # noqa: E712

    total_views = session.exec(
        select(func.coalesce(func.sum(Item.views), 0)).where(mine)
    ).one()

    # Monthly transactions over the last six months
    since = datetime.now(timezone.utc) - timedelta(days=TRANSACTION_WINDOW_DAYS)
    completed = session.exec(
        select(Item.sold_at, Item.price)
        .where(mine)
        .where(Item.status.in_([ItemStatus.SOLD.value, ItemStatus.RENTED.value]))
        .where(Item.sold_at >= since)
    ).all()

    monthly = defaultdict(lambda: {"count": 0, "revenue": 0.0})
    for sold_at, price in completed:
        bucket = monthly[(sold_at.year, sold_at.month)]
        bucket["count"] += 1
        bucket["revenue"] += price

    monthly_transactions = [
        {"year": year, "month": month, **values}
        for (year, month), values in sorted(monthly.items())
    ]

    category_breakdown = [
        {"category": category, "count": count, "average_price": average_price}
        for category, count, average_price in session.exec(
            select(Item.category, func.count(Item.id), func.avg(Item.price))
            .where(mine)
            .group_by(Item.category)
            .order_by(func.count(Item.id).desc())
        ).all()
    ]

    recent_activity = [
        {
            "item_id": item_id,
            "item_title": title,
            "user": {"id": user_id, "name": name, "room_number": room_number},
            "contacted_at": contacted_at,
        }
        for item_id, title, user_id, name, room_number, contacted_at in session.exec(
            select(Item.id, Item.title, User.id, User.name, User.room_number, ItemInterest.contacted_at)
            .join(Item, ItemInterest.item_id == Item.id)
            .join(User, ItemInterest.user_id == User.id)
            .where(mine)
            .order_by(ItemInterest.contacted_at.desc())
            .limit(RECENT_ACTIVITY_LIMIT)
        ).all()
    ]

    return {
        "overview": {
            "total_listings": total_listings,
            "active_listings": active_listings,
            "inactive_listings": total_listings - active_listings,
            "sold_items": _count(session, mine, Item.status == ItemStatus.SOLD.value),
            "rented_items": _count(session, mine, Item.status == ItemStatus.RENTED.value),
            "total_views": total_views,
            "rating": seller.rating,
            "total_ratings": seller.total_ratings,
        },
        "monthly_transactions": monthly_transactions,
        "category_breakdown": category_breakdown,
        "recent_activity": recent_activity,
    }


@router.get("/listings")
async def get_listings(
    status: str = "all",
    search: str = "",
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE),
    session: Session = Depends(get_session),
    seller: User = Depends(require_seller),
):
    conditions = [Item.seller_id == seller.id]

    if status != "all":
        conditions.append(Item.status == status)

    search = search.strip().lower()
    if search:
        conditions.append(or_(
            func.lower(Item.title).contains(search, autoescape=True),
            func.lower(Item.description).contains(search, autoescape=True),
        ))

    total = _count(session, *conditions)

    rows = session.exec(
        select(Item, Hostel)
        .join(Hostel, Item.hostel_id == Hostel.id)
        .where(*conditions)
        .order_by(Item.created_at.desc())
        .offset(page_offset(page, limit))
        .limit(limit)
    ).all()

    return {
        "items": [serialize_item(item, hostel=hostel) for item, hostel in rows],
        "pagination": build_pagination(page, limit, total, len(rows)),
    }


@router.patch("/listings/{item_id}/toggle")
async def toggle_listing(
    item_id: uuid.UUID,
    session: Session = Depends(get_session),
    seller: User = Depends(require_seller),
):
    item = transactions.toggle_listing(session, load_owned(session, Item, item_id, seller))

    return {
        "ok": True,
        "message": f"Listing {'activated' if item.is_active else 'deactivated'} successfully",
        "item": serialize_item(item),
    }
