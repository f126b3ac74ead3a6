from typing import Optional
from sqlmodel import Field, SQLModel
from datetime import datetime, timezone


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    name: str = Field(max_length=50)
    email: str = Field(index=True, unique=True)
    password_hash: str  # bcrypt, never serialized
    phone_number: str
    room_number: str
    avatar: Optional[str] = Field(default=None)

    hostel_id: int = Field(foreign_key="hostels.id", index=True)

    role: str = Field(default="user")  # Possible roles: user, admin
    is_verified: bool = Field(default=False)

    # Reputation
    rating: float = Field(default=0, ge=0, le=5)
    total_ratings: int = Field(default=0)
    items_sold: int = Field(default=0)
    items_rented: int = Field(default=0)

    # Seller workflow, is_seller implies seller_status == "approved"
    is_seller: bool = Field(default=False)
    seller_status: str = Field(default="not_applied", index=True)  # not_applied, pending, approved, rejected
    seller_availability_hours: Optional[str] = Field(default=None)
    seller_profile_description: Optional[str] = Field(default=None, max_length=500)
    seller_applied_at: Optional[datetime] = Field(default=None)
    seller_approved_at: Optional[datetime] = Field(default=None)
    seller_rejected_at: Optional[datetime] = Field(default=None)
    seller_rejection_reason: Optional[str] = Field(default=None)

    def seller_profile(self) -> dict:
        return {
            "availability_hours": self.seller_availability_hours,
            "profile_description": self.seller_profile_description,
            "applied_at": self.seller_applied_at,
            "approved_at": self.seller_approved_at,
            "rejected_at": self.seller_rejected_at,
            "rejection_reason": self.seller_rejection_reason,
        }
