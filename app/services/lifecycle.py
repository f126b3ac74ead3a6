"""
State types and transition tables for the seller workflow and item listings.

Both status fields are persisted as plain strings; every status change goes
through ``advance_seller_status`` / ``advance_item_status`` so the allowed moves
live in one place.
"""
from enum import Enum

from app.utils.errors import InvalidState


class SellerStatus(str, Enum):
    NOT_APPLIED = "not_applied"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ItemStatus(str, Enum):
    AVAILABLE = "available"
    SOLD = "sold"
    RENTED = "rented"
    RESERVED = "reserved"


class ListingType(str, Enum):
    SELL = "sell"
    RENT = "rent"


SELLER_TRANSITIONS = {
    SellerStatus.NOT_APPLIED: {SellerStatus.PENDING},
    SellerStatus.PENDING: {SellerStatus.APPROVED, SellerStatus.REJECTED},
    SellerStatus.REJECTED: {SellerStatus.PENDING},
    SellerStatus.APPROVED: set(),
}

ITEM_TRANSITIONS = {
    ItemStatus.AVAILABLE: {ItemStatus.SOLD, ItemStatus.RENTED, ItemStatus.RESERVED},
    ItemStatus.SOLD: set(),
    ItemStatus.RENTED: set(),
    ItemStatus.RESERVED: set(),
}


def _coerce(enum_cls, value, label: str):
    try:
        return enum_cls(value)
    except ValueError:
        raise InvalidState(f"Unknown {label} '{value}'")


def can_advance_seller(current, target) -> bool:
    current = _coerce(SellerStatus, current, "seller status")
    target = _coerce(SellerStatus, target, "seller status")
    return target in SELLER_TRANSITIONS[current]


def advance_seller_status(current, target) -> SellerStatus:
    """Return ``target`` if the seller workflow allows ``current -> target``."""
    if not can_advance_seller(current, target):
        raise InvalidState(f"Cannot move seller application from '{SellerStatus(current).value}' to '{SellerStatus(target).value}'")
    return SellerStatus(target)


def can_advance_item(current, target) -> bool:
    current = _coerce(ItemStatus, current, "item status")
    target = _coerce(ItemStatus, target, "item status")
    return target in ITEM_TRANSITIONS[current]


def advance_item_status(current, target) -> ItemStatus:
    """Return ``target`` if an item may move ``current -> target``."""
    if not can_advance_item(current, target):
        raise InvalidState(f"Item cannot move from '{ItemStatus(current).value}' to '{ItemStatus(target).value}'")
    return ItemStatus(target)


def completed_status(listing_type) -> ItemStatus:
    """Terminal status reached by a completed transaction for this listing type."""
    if ListingType(listing_type) == ListingType.SELL:
        return ItemStatus.SOLD
    return ItemStatus.RENTED
