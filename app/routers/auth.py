import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from app.db.db import get_session
from app.models.hostel import Hostel
from app.models.user import User
from app.services.hostels import refresh_hostel_counters
from app.utils.auth_helper import create_access_token, get_current_user, get_user_hostel, hash_password, verify_password
from app.utils.errors import AlreadyExists, Unauthenticated
from app.utils.form_validator import LoginRequest, RegisterRequest
from app.utils.serializers import serialize_user

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/register", status_code=201)
def register(payload: RegisterRequest, session: Session = Depends(get_session)):
    existing = session.exec(select(User).where(User.email == payload.email)).first()
    if existing:
        raise AlreadyExists("User already exists with this email")

    hostel = session.get(Hostel, payload.hostel)
    if not hostel or not hostel.is_active:
        raise HTTPException(status_code=400, detail="Invalid hostel selected")

    user = User(
        name=payload.name,
        email=payload.email,
        password_hash=hash_password(payload.password),
        phone_number=payload.phone_number,
        hostel_id=hostel.id,
        room_number=payload.room_number,
    )

    session.add(user)
    refresh_hostel_counters(session, hostel.id)
    session.commit()
    session.refresh(user)
    session.refresh(hostel)

    logger.info("Registered user %s in hostel %s", user.id, hostel.id)

    return {
        "ok": True,
        "message": "User registered successfully",
        "token": create_access_token(user),
        "user": serialize_user(user, hostel),
    }


@router.post("/login")
def login(payload: LoginRequest, session: Session = Depends(get_session)):
    user = session.exec(select(User).where(User.email == payload.email)).first()

    if not user or not verify_password(payload.password, user.password_hash):
        raise Unauthenticated("Invalid credentials")

    return {
        "ok": True,
        "message": "Login successful",
        "token": create_access_token(user),
        "user": serialize_user(user, get_user_hostel(session, user)),
    }


@router.get("/me")
def get_me(
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    return {"user": serialize_user(user, get_user_hostel(session, user))}
