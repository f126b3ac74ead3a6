import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import jwt, JWTError
from sqlmodel import Session, select

from app import config
from app.db.db import get_session
from app.models.hostel import Hostel
from app.models.item import Item
from app.models.user import User
from app.utils.errors import Forbidden, NotFound, Unauthenticated


bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=config.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def create_access_token(user: User) -> str:
    now = datetime.now(timezone.utc)

    payload = {
        "sub": str(user.id),
        "iat": now,
        "exp": now + timedelta(days=config.JWT_EXPIRE_DAYS),
    }

    return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def _user_from_token(session: Session, token: str) -> Optional[User]:
    try:
        payload = jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
        user_id = int(payload["sub"])
    except (JWTError, KeyError, TypeError, ValueError):
        return None

    return session.get(User, user_id)


def get_current_user(
    token: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> User:
    if not token:
        raise Unauthenticated()

    user = _user_from_token(session, token.credentials)
    if not user:
        raise Unauthenticated("Token is not valid")

    return user


def get_user_hostel(session: Session, user: User) -> Hostel:
    hostel = session.get(Hostel, user.hostel_id)

    if not hostel:
        raise NotFound("Hostel not found")

    return hostel


def university_hostel_ids(session: Session, university: str) -> list[int]:
    return list(session.exec(
        select(Hostel.id)
        .where(Hostel.university == university)
        .where(Hostel.is_active == True)  # noqa: E712
    ).all())


def require_same_hostel(hostel_id: int, user: User = Depends(get_current_user)) -> User:
    if user.hostel_id != hostel_id:
        raise Forbidden("Access denied. You can only access items from your hostel.")
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    if user.role != "admin":
        raise Forbidden("Admin access required")
    return user


def require_seller(user: User = Depends(get_current_user)) -> User:
    if not user.is_seller:
        raise Forbidden("Access denied. Only approved sellers can do this.")
    return user


def load_owned(session: Session, model, record_id, user: User):
    """Load a seller-owned record, failing unless ``user`` is its seller."""
    record = session.get(model, record_id)

    if not record:
        raise NotFound(f"{model.__name__} not found")

    if record.seller_id != user.id:
        raise Forbidden("Access denied. You can only modify your own items.")

    return record


def require_item_owner(
    item_id: uuid.UUID,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> Item:
    return load_owned(session, Item, item_id, user)


def ensure_item_visible(session: Session, user: User, item) -> None:
    """Items are visible across every active hostel of the viewer's university."""
    if item.hostel_id == user.hostel_id:
        return

    hostel = get_user_hostel(session, user)
    if item.hostel_id not in university_hostel_ids(session, hostel.university):
        raise Forbidden("Access denied. Item not available in your university.")
