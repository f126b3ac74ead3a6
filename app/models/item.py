import uuid
from typing import Dict, List, Optional
from sqlmodel import JSON, Column, Field, Index, SQLModel
from datetime import datetime, timezone


class Item(SQLModel, table=True):
    __tablename__ = "items"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), index=True)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Ownership, hostel is copied from the seller at creation
    seller_id: int = Field(foreign_key="users.id")
    hostel_id: int = Field(foreign_key="hostels.id")

    # Listing fields
    title: str = Field(max_length=100)
    description: str = Field(max_length=1000)
    category: str
    condition: str
    listing_type: str  # "sell" or "rent"
    price: float = Field(ge=0, index=True)
    rent_duration: Optional[str] = Field(default=None)  # only for rent: hour/day/week/month

    images: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    tags: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    specifications: Dict[str, str] = Field(default_factory=dict, sa_column=Column(JSON))

    # Lifecycle
    status: str = Field(default="available")  # available, sold, rented, reserved
    is_active: bool = Field(default=True)
    sold_at: Optional[datetime] = Field(default=None)

    views: int = Field(default=0)
    is_promoted: bool = Field(default=False)
    promoted_until: Optional[datetime] = Field(default=None)

    __table_args__ = (
        Index("ix_items_hostel_status_active", "hostel_id", "status", "is_active"),
        Index("ix_items_category_listing_type", "category", "listing_type"),
        Index("ix_items_seller_status", "seller_id", "status"),
    )

    def formatted_price(self) -> str:
        if self.listing_type == "rent":
            return f"₹{self.price:g}/{self.rent_duration}"
        return f"₹{self.price:g}"
