import logging
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Session

from app.models.user import User
from app.services.lifecycle import SellerStatus, advance_seller_status
from app.utils.errors import InvalidState

logger = logging.getLogger(__name__)


def apply_seller(session: Session, user: User, availability_hours: str, profile_description: Optional[str] = "") -> User:
    if user.is_seller:
        raise InvalidState("You are already a seller.")

    if user.seller_status == SellerStatus.PENDING.value:
        raise InvalidState("You have already applied to become a seller. Please wait for approval.")

    user.seller_status = advance_seller_status(user.seller_status, SellerStatus.PENDING).value

    # a fresh application replaces any earlier decision
    user.seller_availability_hours = availability_hours
    user.seller_profile_description = profile_description or ""
    user.seller_applied_at = datetime.now(timezone.utc)
    user.seller_approved_at = None
    user.seller_rejected_at = None
    user.seller_rejection_reason = None

    session.add(user)
    session.commit()
    session.refresh(user)

    logger.info("User %s applied to become a seller", user.id)
    return user


def approve_seller(session: Session, user: User) -> User:
    if user.seller_status != SellerStatus.PENDING.value:
        raise InvalidState("No pending seller application found.")

    user.seller_status = advance_seller_status(user.seller_status, SellerStatus.APPROVED).value
    user.is_seller = True
    user.seller_approved_at = datetime.now(timezone.utc)

    session.add(user)
    session.commit()
    session.refresh(user)

    logger.info("Seller application of user %s approved", user.id)
    return user


def reject_seller(session: Session, user: User, reason: str) -> User:
    if user.seller_status != SellerStatus.PENDING.value:
        raise InvalidState("No pending seller application found.")

    user.seller_status = advance_seller_status(user.seller_status, SellerStatus.REJECTED).value
    user.seller_rejected_at = datetime.now(timezone.utc)
    user.seller_rejection_reason = reason

    session.add(user)
    session.commit()
    session.refresh(user)

    logger.info("Seller application of user %s rejected: %s", user.id, reason)
    return user
