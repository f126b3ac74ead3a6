from fastapi import APIRouter, Depends, Query
from sqlmodel import Session, func, select

from app.db.db import get_session
from app.models.hostel import Hostel
from app.models.item import Item
from app.models.user import User
from app.services.lifecycle import ItemStatus
from app.utils.auth_helper import get_current_user
from app.utils.errors import Forbidden, NotFound
from app.utils.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, build_pagination, page_offset
from app.utils.serializers import serialize_item, serialize_user


router = APIRouter()


def get_hostel_mate(session: Session, user_id: int, viewer: User) -> User:
    user = session.get(User, user_id)

    if not user:
        raise NotFound("User not found")

    if user.hostel_id != viewer.hostel_id:
        raise Forbidden("Access denied. You can only view profiles from your hostel.")

    return user


@router.get("/{user_id}")
async def get_user_profile(
    user_id: int,
    session: Session = Depends(get_session),
    viewer: User = Depends(get_current_user),
):
    user = get_hostel_mate(session, user_id, viewer)

    active_items_count = session.exec(
        select(func.count(Item.id))
        .where(Item.seller_id == user.id)
        .where(Item.status == ItemStatus.AVAILABLE.value)
        .where(Item.is_active == True)  # noqa: E712
    ).one()

    data = serialize_user(user, session.get(Hostel, user.hostel_id))
    # contact details are revealed per item through /items/{id}/contact
    data.pop("email", None)
    data.pop("phone_number", None)
    data["active_items_count"] = active_items_count

    return data


@router.get("/{user_id}/items")
async def get_user_items(
    user_id: int,
    status: str = ItemStatus.AVAILABLE.value,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    session: Session = Depends(get_session),
    viewer: User = Depends(get_current_user),
):
    user = get_hostel_mate(session, user_id, viewer)

    conditions = [Item.seller_id == user.id, Item.is_active == True]  # noqa: E712
    if status != "all":
        conditions.append(Item.status == status)

    total = session.exec(
        select(func.count()).select_from(Item).where(*conditions)
    ).one()

    rows = session.exec(
        select(Item, Hostel)
        .join(Hostel, Item.hostel_id == Hostel.id)
        .where(*conditions)
        .order_by(Item.created_at.desc())
        .offset(page_offset(page, limit))
        .limit(limit)
    ).all()

    return {
        "items": [serialize_item(item, user, hostel) for item, hostel in rows],
        "pagination": build_pagination(page, limit, total, len(rows)),
    }
