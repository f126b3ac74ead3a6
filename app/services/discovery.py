"""
Discovery: scoped, filtered, optionally searched and paginated item listings.

Scope decides which hostels are candidates: the caller's own hostel, or every
active hostel sharing the caller's university. Filters and free-text search
only ever narrow that candidate set.
"""
from typing import Literal, Optional

from pydantic import BaseModel, Field
from sqlalchemy import or_
from sqlmodel import Session, func, select

from app.models.hostel import Hostel
from app.models.item import Item
from app.models.user import User
from app.services.lifecycle import ItemStatus, ListingType
from app.utils.auth_helper import get_user_hostel, university_hostel_ids
from app.utils.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, build_pagination, page_offset
from app.utils.serializers import serialize_rows

Scope = Literal["hostel", "university"]

DEFAULT_PRICE_RANGE = {"min_price": 0, "avg_price": 0, "max_price": 10000}


class DiscoveryQuery(BaseModel):
    scope: Scope = "hostel"
    search: Optional[str] = None
    category: Optional[str] = None
    listing_type: Optional[str] = None
    condition: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)


def resolve_scope_hostel_ids(session: Session, user: User, scope: str) -> list[int]:
    if scope == "university":
        hostel = get_user_hostel(session, user)
        return university_hostel_ids(session, hostel.university)

    return [user.hostel_id]


def scope_conditions(hostel_ids: list[int]) -> list:
    return [
        Item.hostel_id.in_(hostel_ids),
        Item.status == ItemStatus.AVAILABLE.value,
        Item.is_active == True,  # noqa: E712
    ]


def filter_conditions(query: DiscoveryQuery) -> list:
    conditions = []

    # unknown values are compared literally and simply match nothing
    if query.category:
        conditions.append(Item.category == query.category)
    if query.listing_type:
        conditions.append(Item.listing_type == query.listing_type)
    if query.condition:
        conditions.append(Item.condition == query.condition)

    if query.min_price is not None:
        conditions.append(Item.price >= query.min_price)
    if query.max_price is not None:
        conditions.append(Item.price <= query.max_price)

    return conditions


def tag_contains(term: str):
    """EXISTS over the item's tags, one tag at a time."""
    tag = func.json_each(Item.tags).table_valued("value")

    return (
        select(tag.c.value)
        .where(func.lower(tag.c.value).contains(term, autoescape=True))
        .correlate(Item)
        .exists()
    )


def search_condition(search: str):
    """Case-insensitive substring match on title, description or any tag."""
    term = search.lower()

    return or_(
        func.lower(Item.title).contains(term, autoescape=True),
        func.lower(Item.description).contains(term, autoescape=True),
        tag_contains(term),
    )


def compose_conditions(hostel_ids: list[int], query: DiscoveryQuery) -> list:
    conditions = scope_conditions(hostel_ids) + filter_conditions(query)

    search = (query.search or "").strip()
    if search:
        conditions.append(search_condition(search))

    return conditions


def page_items(session: Session, conditions: list, page: int, limit: int) -> dict:
    """Run a listing query ordered promoted first, then newest first."""
    total = session.exec(
        select(func.count()).select_from(Item).where(*conditions)
    ).one()

    rows = session.exec(
        select(Item, User, Hostel)
        .join(User, User.id == Item.seller_id)
        .join(Hostel, Hostel.id == Item.hostel_id)
        .where(*conditions)
        .order_by(Item.is_promoted.desc(), Item.created_at.desc())
        .offset(page_offset(page, limit))
        .limit(limit)
    ).all()

    return {
        "items": serialize_rows(rows),
        "pagination": build_pagination(page, limit, total, len(rows)),
    }


def discover_items(session: Session, user: User, query: DiscoveryQuery) -> dict:
    hostel_ids = resolve_scope_hostel_ids(session, user, query.scope)

    if not hostel_ids:
        return {
            "items": [],
            "pagination": build_pagination(query.page, query.limit, 0, 0),
        }

    return page_items(session, compose_conditions(hostel_ids, query), query.page, query.limit)


def _count_available(session: Session, hostel_ids: list[int]) -> int:
    if not hostel_ids:
        return 0

    return session.exec(
        select(func.count()).select_from(Item).where(*scope_conditions(hostel_ids))
    ).one()


def discovery_metadata(session: Session, user: User, scope: str = "hostel") -> dict:
    """Filter options and counts for the discovery UI, computed within ``scope``."""
    hostel = get_user_hostel(session, user)

    university_hostels = session.exec(
        select(Hostel)
        .where(Hostel.university == hostel.university)
        .where(Hostel.is_active == True)  # noqa: E712
        .order_by(Hostel.name)
    ).all()
    university_ids = [h.id for h in university_hostels]

    hostel_ids = university_ids if scope == "university" else [hostel.id]
    conditions = scope_conditions(hostel_ids)

    categories = session.exec(
        select(Item.category).where(*conditions).distinct()
    ).all()

    min_price, avg_price, max_price = session.exec(
        select(func.min(Item.price), func.avg(Item.price), func.max(Item.price)).where(*conditions)
    ).one()

    if min_price is None:
        price_range = dict(DEFAULT_PRICE_RANGE)
    else:
        price_range = {"min_price": min_price, "avg_price": avg_price, "max_price": max_price}

    listing_types = {listing_type.value: 0 for listing_type in ListingType}
    for listing_type, count in session.exec(
        select(Item.listing_type, func.count()).where(*conditions).group_by(Item.listing_type)
    ).all():
        listing_types[listing_type] = count

    return {
        "categories": sorted(categories),
        "price_range": price_range,
        "listing_types": listing_types,
        "scope_counts": {
            "hostel": _count_available(session, [hostel.id]),
            "university": _count_available(session, university_ids),
        },
        "user_info": {
            "hostel": hostel.name,
            "university": hostel.university,
            "available_hostels": [{"id": h.id, "name": h.name} for h in university_hostels],
        },
    }
