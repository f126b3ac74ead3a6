import logging

from sqlalchemy import update
from sqlmodel import Session, func, select

from app.models.hostel import Hostel
from app.models.item import Item
from app.models.user import User
from app.services.lifecycle import ItemStatus

logger = logging.getLogger(__name__)


def refresh_hostel_counters(session: Session, hostel_id: int) -> None:
    """Recompute a hostel's denormalized counters from users and items in one UPDATE."""
    session.flush()

    total_users = (
        select(func.count(User.id))
        .where(User.hostel_id == hostel_id)
        .scalar_subquery()
    )
    total_active_items = (
        select(func.count(Item.id))
        .where(Item.hostel_id == hostel_id)
        .where(Item.status == ItemStatus.AVAILABLE.value)
        .where(Item.is_active == True)  # noqa: E712
        .scalar_subquery()
    )

    session.exec(
        update(Hostel)
        .where(Hostel.id == hostel_id)
        .values(total_users=total_users, total_active_items=total_active_items)
        .execution_options(synchronize_session=False)
    )


def reconcile_all(session: Session) -> int:
    hostel_ids = session.exec(select(Hostel.id)).all()

    for hostel_id in hostel_ids:
        refresh_hostel_counters(session, hostel_id)

    session.commit()
    logger.info("Reconciled counters for %d hostels", len(hostel_ids))

    return len(hostel_ids)
