from fastapi import APIRouter, HTTPException, Query
from fastapi.params import Depends
from sqlmodel import Session, select, func

from app.db.db import get_session
from app.models.hostel import Hostel
from app.models.interest import ItemInterest
from app.models.item import Item
from app.models.user import User
from app.utils.auth_helper import get_current_user, get_user_hostel, hash_password, verify_password
from app.utils.form_validator import PasswordChangeRequest, ProfileUpdateRequest
from app.utils.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, build_pagination, page_offset
from app.utils.serializers import serialize_item, serialize_user


router = APIRouter()


@router.get("/me")
async def get_my_profile(
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    return serialize_user(user, get_user_hostel(session, user))


@router.put("")
async def update_profile(
    payload: ProfileUpdateRequest,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    for field, value in payload.model_dump(exclude_none=True).items():
        setattr(user, field, value)

    session.add(user)
    session.commit()
    session.refresh(user)

    return {
        "ok": True,
        "message": "Profile updated successfully",
        "user": serialize_user(user, get_user_hostel(session, user)),
    }


@router.put("/password")
async def change_password(
    payload: PasswordChangeRequest,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    if not verify_password(payload.current_password, user.password_hash):
        raise HTTPException(status_code=400, detail="Current password is incorrect")

    user.password_hash = hash_password(payload.new_password)

    session.add(user)
    session.commit()

    return {"ok": True, "message": "Password updated successfully"}


@router.get("/items")
async def get_my_items(
    status: str = "all",
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    conditions = [Item.seller_id == user.id]
    if status != "all":
        conditions.append(Item.status == status)

    total = session.exec(
        select(func.count()).select_from(Item).where(*conditions)
    ).one()

    items = session.exec(
        select(Item)
        .where(*conditions)
        .order_by(Item.created_at.desc())
        .offset(page_offset(page, limit))
        .limit(limit)
    ).all()

    hostel = get_user_hostel(session, user)

    return {
        "items": [serialize_item(item, hostel=hostel) for item in items],
        "pagination": build_pagination(page, limit, total, len(items)),
    }


@router.get("/interests")
async def get_my_interests(
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    rows = session.exec(
        select(ItemInterest, Item, User, Hostel)
        .join(Item, ItemInterest.item_id == Item.id)
        .join(User, Item.seller_id == User.id)
        .join(Hostel, Item.hostel_id == Hostel.id)
        .where(ItemInterest.user_id == user.id)
        .order_by(ItemInterest.contacted_at.desc())
    ).all()

    return {
        "interests": [
            {
                "contacted_at": interest.contacted_at,
                "item": serialize_item(item, seller, hostel),
            }
            for interest, item, seller, hostel in rows
        ],
    }
