import uuid
from typing import Literal, Optional
from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from sqlmodel import Session, func, select

from app import config
from app.db.db import get_session
from app.models.hostel import Hostel
from app.models.interest import ItemInterest
from app.models.item import Item
from app.models.user import User
from app.services import transactions
from app.services.discovery import DiscoveryQuery, discover_items, discovery_metadata
from app.utils.auth_helper import ensure_item_visible, get_current_user, get_user_hostel, require_item_owner
from app.utils.errors import Forbidden, NotFound
from app.utils.form_validator import ItemCreateRequest, ItemUpdateRequest, RateRequest, ReportRequest
from app.utils.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from app.utils.s3_service import compress_image, generate_signed_url, upload_to_s3
from app.utils.serializers import serialize_item


router = APIRouter()


def get_item_or_404(session: Session, item_id: uuid.UUID) -> Item:
    item = session.get(Item, item_id)

    if not item:
        raise NotFound("Item not found")

    return item


@router.get("")
async def get_items(
    scope: Literal["hostel", "university"] = "hostel",
    search: Optional[str] = None,
    category: Optional[str] = None,
    listing_type: Optional[str] = None,
    condition: Optional[str] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    query = DiscoveryQuery(
        scope=scope,
        search=search,
        category=category,
        listing_type=listing_type,
        condition=condition,
        min_price=min_price,
        max_price=max_price,
        page=page,
        limit=limit,
    )

    result = discover_items(session, user, query)
    hostel = get_user_hostel(session, user)

    result["discovery_info"] = {
        "user_hostel": hostel.name,
        "user_university": hostel.university,
        "scope": scope,
    }

    return result


@router.get("/discovery/filters")
async def get_discovery_filters(
    scope: Literal["hostel", "university"] = "hostel",
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    return discovery_metadata(session, user, scope)


@router.post("/images")
async def upload_item_image(
    image: UploadFile = File(...),
    user: User = Depends(get_current_user),
):
    if not user.is_seller:
        raise Forbidden("Only approved sellers can upload listing images.")

    raw_bytes = await image.read()

    if len(raw_bytes) > config.MAX_UPLOAD_SIZE_MB * 1024 * 1024:
        raise HTTPException(status_code=400, detail=f"Image exceeds {config.MAX_UPLOAD_SIZE_MB}MB limit")

    buffer, ext = compress_image(raw_bytes)
    key = upload_to_s3(buffer, ext, image.filename)

    return {"key": key, "url": generate_signed_url(key)}


@router.post("", status_code=201)
async def create_item(
    payload: ItemCreateRequest,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    item = transactions.create_item(session, user, payload)
    hostel = session.get(Hostel, item.hostel_id)

    return {
        "ok": True,
        "message": "Item created successfully",
        "item": serialize_item(item, user, hostel),
    }


@router.get("/{item_id}")
async def get_item(
    item_id: uuid.UUID,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    item = get_item_or_404(session, item_id)
    ensure_item_visible(session, user, item)

    item = transactions.view_item(session, item, user)

    seller = session.get(User, item.seller_id)
    hostel = session.get(Hostel, item.hostel_id)

    interested_count = session.exec(
        select(func.count(ItemInterest.id)).where(ItemInterest.item_id == item.id)
    ).one()

    is_interested = session.exec(
        select(ItemInterest.id)
        .where(ItemInterest.item_id == item.id)
        .where(ItemInterest.user_id == user.id)
    ).first() is not None

    data = serialize_item(item, seller, hostel)
    data["interested_count"] = interested_count

    return {
        "item": data,
        "is_owner": item.seller_id == user.id,
        "is_interested": is_interested,
    }


@router.put("/{item_id}")
async def update_item(
    payload: ItemUpdateRequest,
    item: Item = Depends(require_item_owner),
    session: Session = Depends(get_session),
):
    item = transactions.update_item(session, item, payload)

    return {
        "ok": True,
        "message": "Item updated successfully",
        "item": serialize_item(item),
    }


@router.delete("/{item_id}")
async def delete_item(
    item: Item = Depends(require_item_owner),
    session: Session = Depends(get_session),
):
    transactions.delete_item(session, item)

    return {"ok": True, "message": "Item deleted successfully"}


@router.patch("/{item_id}/mark-sold")
async def mark_item_sold(
    item_id: uuid.UUID,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    item = get_item_or_404(session, item_id)
    item = transactions.mark_item_sold(session, item, user)

    return {
        "ok": True,
        "message": f"Item marked as {item.status} successfully",
        "item": serialize_item(item),
    }


@router.post("/{item_id}/interest")
async def express_interest(
    item_id: uuid.UUID,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    item = get_item_or_404(session, item_id)
    ensure_item_visible(session, user, item)

    transactions.express_interest(session, item, user)

    return {"ok": True, "message": "Interest expressed successfully"}


@router.post("/{item_id}/contact")
async def contact_seller(
    item_id: uuid.UUID,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    item = get_item_or_404(session, item_id)
    ensure_item_visible(session, user, item)

    contact = transactions.contact_seller(session, item, user)

    return {
        "ok": True,
        "message": "Contact information revealed",
        "data": contact,
    }


@router.post("/{item_id}/rate")
async def rate_seller(
    item_id: uuid.UUID,
    payload: RateRequest,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    item = get_item_or_404(session, item_id)

    seller = transactions.rate_seller(session, item, user, payload.rating, payload.review)

    return {
        "ok": True,
        "message": "Rating submitted successfully",
        "data": {
            "new_rating": seller.rating,
            "total_ratings": seller.total_ratings,
        },
    }


@router.post("/{item_id}/report")
async def report_item(
    item_id: uuid.UUID,
    payload: ReportRequest,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    item = get_item_or_404(session, item_id)

    transactions.report_item(session, item, user, payload.reason, payload.description)

    return {
        "ok": True,
        "message": "Report submitted successfully. Our team will review it shortly.",
    }
