from fastapi import APIRouter, Depends
from sqlmodel import Session

from app import config
from app.db.db import get_session
from app.models.user import User
from app.services import seller as seller_service
from app.utils.auth_helper import get_current_user, get_user_hostel
from app.utils.errors import Forbidden
from app.utils.form_validator import SellerApplyRequest
from app.utils.serializers import serialize_user


router = APIRouter()


@router.post("/apply")
def apply_to_be_seller(
    payload: SellerApplyRequest,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    user = seller_service.apply_seller(session, user, payload.availability_hours, payload.profile_description)

    return {
        "ok": True,
        "message": "Seller application submitted successfully. You will be notified once approved.",
        "seller_status": user.seller_status,
        "approval_mode": config.SELLER_APPROVAL_MODE,
    }


@router.post("/mock-approve")
def mock_approve_seller(
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    """Self-approval of a pending application, only while approval mode is ``auto``."""
    if config.SELLER_APPROVAL_MODE != "auto":
        raise Forbidden("Seller applications are reviewed by an administrator.")

    user = seller_service.approve_seller(session, user)

    return {
        "ok": True,
        "message": "Congratulations! Your seller application has been approved.",
        "user": serialize_user(user, get_user_hostel(session, user)),
    }


@router.get("/status")
def get_seller_status(user: User = Depends(get_current_user)):
    return {
        "seller_status": user.seller_status,
        "is_seller": user.is_seller,
        "seller_profile": user.seller_profile(),
    }
