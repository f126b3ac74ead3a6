from typing import Optional

from app.models.hostel import Hostel
from app.models.item import Item
from app.models.user import User
from app.utils.s3_service import generate_signed_url, get_image_urls

# never dumped as-is: the hash stays server side, seller_* are regrouped under seller_profile
USER_PRIVATE_FIELDS = {
    "password_hash",
    "seller_availability_hours",
    "seller_profile_description",
    "seller_applied_at",
    "seller_approved_at",
    "seller_rejected_at",
    "seller_rejection_reason",
}


def serialize_user(user: User, hostel: Optional[Hostel] = None) -> dict:
    data = user.model_dump(exclude=USER_PRIVATE_FIELDS)
    data["avatar"] = generate_signed_url(user.avatar) if user.avatar else None
    data["seller_profile"] = user.seller_profile()

    if hostel:
        data["hostel"] = {
            "id": hostel.id,
            "name": hostel.name,
            "university": hostel.university,
            "address": hostel.address,
        }

    return data


def seller_summary(user: User) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "room_number": user.room_number,
        "rating": user.rating,
        "avatar": generate_signed_url(user.avatar) if user.avatar else None,
    }


def serialize_item(item: Item, seller: Optional[User] = None, hostel: Optional[Hostel] = None) -> dict:
    data = item.model_dump()
    data["images"] = get_image_urls(item.images)
    data["formatted_price"] = item.formatted_price()

    if seller:
        data["seller"] = seller_summary(seller)
    if hostel:
        data["hostel"] = {"id": hostel.id, "name": hostel.name, "university": hostel.university}

    return data


def serialize_rows(rows) -> list:
    """Serialize ``(Item, User, Hostel)`` rows from a joined select."""
    return [serialize_item(item, seller, hostel) for item, seller, hostel in rows]
