from fastapi import APIRouter, Depends, Query
from sqlmodel import Session, select

from app.db.db import get_session
from app.models.hostel import Hostel
from app.models.user import User
from app.services.discovery import page_items, scope_conditions
from app.utils.auth_helper import get_current_user, get_user_hostel, require_same_hostel
from app.utils.errors import NotFound
from app.utils.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE


router = APIRouter()


def serialize_hostel(hostel: Hostel) -> dict:
    data = hostel.model_dump()
    data["full_address"] = hostel.full_address()
    return data


@router.get("")
async def get_hostels(session: Session = Depends(get_session)):
    hostels = session.exec(
        select(Hostel)
        .where(Hostel.is_active == True)  # noqa: E712
        .order_by(Hostel.name)
    ).all()

    return {"hostels": [serialize_hostel(hostel) for hostel in hostels]}


@router.get("/my/info")
async def get_my_hostel(
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    return serialize_hostel(get_user_hostel(session, user))


@router.get("/{hostel_id}")
async def get_hostel(hostel_id: int, session: Session = Depends(get_session)):
    hostel = session.get(Hostel, hostel_id)

    if not hostel:
        raise NotFound("Hostel not found")

    return serialize_hostel(hostel)


@router.get("/{hostel_id}/items")
async def get_hostel_items(
    hostel_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    session: Session = Depends(get_session),
    user: User = Depends(require_same_hostel),
):
    return page_items(session, scope_conditions([hostel_id]), page, limit)
