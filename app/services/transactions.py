"""
Item lifecycle operations: listing, editing, viewing, interest, contact,
the sold/rented transition and seller ratings.

Preconditions are checked before anything is written and each operation
commits once, so a rejected call leaves every record unchanged. Counters are
bumped with single SQL UPDATE expressions instead of read-modify-write.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.models.hostel import Hostel
from app.models.interest import ItemInterest
from app.models.item import Item
from app.models.user import User
from app.services.hostels import refresh_hostel_counters
from app.services.lifecycle import ItemStatus, ListingType, advance_item_status, completed_status
from app.utils.errors import AlreadyExpressed, Forbidden, InvalidState, SelfInteractionForbidden
from app.utils.form_validator import ItemCreateRequest, ItemUpdateRequest
from app.utils.s3_service import delete_s3_object, generate_signed_url

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("title", "description", "price", "condition", "status", "images", "tags", "specifications")


def _now():
    return datetime.now(timezone.utc)


def _find_interest(session: Session, item: Item, user: User) -> Optional[ItemInterest]:
    return session.exec(
        select(ItemInterest)
        .where(ItemInterest.item_id == item.id)
        .where(ItemInterest.user_id == user.id)
    ).first()


def create_item(session: Session, seller: User, payload: ItemCreateRequest) -> Item:
    if not seller.is_seller:
        raise Forbidden("Only approved sellers can create listings.")

    item = Item(
        **payload.model_dump(),
        seller_id=seller.id,
        hostel_id=seller.hostel_id,
    )

    session.add(item)
    refresh_hostel_counters(session, seller.hostel_id)
    session.commit()
    session.refresh(item)

    logger.info("Item %s listed by seller %s", item.id, seller.id)
    return item


def update_item(session: Session, item: Item, payload: ItemUpdateRequest) -> Item:
    changes = payload.model_dump(exclude_unset=True, include=set(EDITABLE_FIELDS))

    if changes.get("status") is not None and changes["status"] != item.status:
        target = advance_item_status(item.status, changes["status"])
        if target != ItemStatus.RESERVED:
            raise InvalidState("Use mark-sold to complete a transaction.")

    for field, value in changes.items():
        if value is None:
            continue
        setattr(item, field, value)

    item.updated_at = _now()

    session.add(item)
    refresh_hostel_counters(session, item.hostel_id)
    session.commit()
    session.refresh(item)

    return item


def delete_item(session: Session, item: Item) -> None:
    item_id = item.id
    images = list(item.images or [])
    hostel_id = item.hostel_id

    session.exec(
        delete(ItemInterest)
        .where(ItemInterest.item_id == item_id)
        .execution_options(synchronize_session=False)
    )
    session.delete(item)
    refresh_hostel_counters(session, hostel_id)
    session.commit()

    for ref in images:
        delete_s3_object(ref)

    logger.info("Item %s deleted", item_id)


def toggle_listing(session: Session, item: Item) -> Item:
    if item.status != ItemStatus.AVAILABLE.value:
        raise InvalidState(f"Listing is already {item.status} and cannot be reactivated")

    item.is_active = not item.is_active
    item.updated_at = _now()

    session.add(item)
    refresh_hostel_counters(session, item.hostel_id)
    session.commit()
    session.refresh(item)

    return item


def view_item(session: Session, item: Item, viewer: User) -> Item:
    """Count one view per request, never for the item's own seller."""
    if item.seller_id == viewer.id:
        return item

    session.exec(
        update(Item)
        .where(Item.id == item.id)
        .values(views=Item.views + 1)
        .execution_options(synchronize_session=False)
    )
    session.commit()
    session.refresh(item)

    return item


def mark_item_sold(session: Session, item: Item, seller: User) -> Item:
    if item.seller_id != seller.id:
        raise Forbidden("Only the seller can mark items as sold")

    if item.status != ItemStatus.AVAILABLE.value:
        raise InvalidState("Item is already marked as sold or rented")

    target = advance_item_status(item.status, completed_status(item.listing_type))
    now = _now()

    # conditional on status so concurrent calls complete the item at most once
    result = session.exec(
        update(Item)
        .where(Item.id == item.id)
        .where(Item.status == ItemStatus.AVAILABLE.value)
        .values(status=target.value, is_active=False, sold_at=now, updated_at=now)
        .execution_options(synchronize_session=False)
    )

    if result.rowcount != 1:
        session.rollback()
        raise InvalidState("Item is already marked as sold or rented")

    counter = User.items_sold if item.listing_type == ListingType.SELL.value else User.items_rented
    session.exec(
        update(User)
        .where(User.id == seller.id)
        .values({counter: counter + 1})
        .execution_options(synchronize_session=False)
    )

    refresh_hostel_counters(session, item.hostel_id)
    session.commit()
    session.refresh(item)
    session.refresh(seller)

    logger.info("Item %s marked as %s by seller %s", item.id, target.value, seller.id)
    return item


def express_interest(session: Session, item: Item, buyer: User) -> ItemInterest:
    if item.seller_id == buyer.id:
        raise SelfInteractionForbidden("You cannot express interest in your own item")

    if _find_interest(session, item, buyer):
        raise AlreadyExpressed("You have already expressed interest in this item")

    interest = ItemInterest(item_id=item.id, user_id=buyer.id)
    session.add(interest)

    try:
        session.commit()
    except IntegrityError:
        # the unique (item, user) constraint caught a concurrent duplicate
        session.rollback()
        raise AlreadyExpressed("You have already expressed interest in this item")

    session.refresh(interest)
    return interest


def contact_seller(session: Session, item: Item, buyer: User) -> dict:
    """Reveal the seller's contact details, recording interest once."""
    if item.seller_id == buyer.id:
        raise SelfInteractionForbidden("You cannot contact yourself")

    if not _find_interest(session, item, buyer):
        session.add(ItemInterest(item_id=item.id, user_id=buyer.id))
        try:
            session.commit()
        except IntegrityError:
            # recorded by a concurrent request, contact stays idempotent
            session.rollback()

    seller = session.get(User, item.seller_id)
    hostel = session.get(Hostel, item.hostel_id)

    return {
        "seller": {
            "name": seller.name,
            "room_number": seller.room_number,
            "phone_number": seller.phone_number,
            "rating": seller.rating,
            "avatar": generate_signed_url(seller.avatar) if seller.avatar else None,
        },
        "hostel": hostel.name if hostel else None,
    }


def rate_seller(session: Session, item: Item, buyer: User, rating: int, review: str = "") -> User:
    if item.seller_id == buyer.id:
        raise SelfInteractionForbidden("You cannot rate yourself")

    if item.status == ItemStatus.AVAILABLE.value:
        raise InvalidState("Can only rate completed transactions")

    if not _find_interest(session, item, buyer):
        raise Forbidden("You can only rate sellers you have interacted with")

    # running average, both sides of SET read the pre-update row
    session.exec(
        update(User)
        .where(User.id == item.seller_id)
        .values(
            rating=(User.rating * User.total_ratings + rating) / (User.total_ratings + 1),
            total_ratings=User.total_ratings + 1,
        )
        .execution_options(synchronize_session=False)
    )
    session.commit()

    seller = session.get(User, item.seller_id)
    session.refresh(seller)

    logger.info(
        "Rating submitted: item=%s seller=%s buyer=%s rating=%s review=%r",
        item.id, seller.id, buyer.id, rating, review or "",
    )
    return seller


def report_item(session: Session, item: Item, reporter: User, reason: str, description: str = "") -> None:
    """Reports are accepted and logged; there is no moderation queue."""
    if item.seller_id == reporter.id:
        raise SelfInteractionForbidden("You cannot report yourself")

    logger.info(
        "User report: reported_by=%s reported_user=%s item=%s hostel=%s reason=%r description=%r",
        reporter.id, item.seller_id, item.id, reporter.hostel_id, reason, description or "",
    )
