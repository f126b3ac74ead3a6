from typing import List, Optional
from sqlmodel import JSON, Column, Field, SQLModel
from datetime import datetime, timezone


class Hostel(SQLModel, table=True):
    __tablename__ = "hostels"

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    name: str = Field(max_length=100, unique=True, index=True)
    university: str = Field(index=True)  # discovery scope grouping key

    # {street, city, state, zip_code, country}
    address: dict = Field(default_factory=dict, sa_column=Column(JSON))
    # {phone, email}
    contact_info: dict = Field(default_factory=dict, sa_column=Column(JSON))

    total_rooms: int = Field(ge=1)
    facilities: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    description: Optional[str] = Field(default=None, max_length=500)
    is_active: bool = Field(default=True, index=True)

    # Denormalized, recomputed by app.services.hostels.refresh_hostel_counters
    total_users: int = Field(default=0)
    total_active_items: int = Field(default=0)

    def full_address(self) -> str:
        a = self.address or {}
        return (
            f"{a.get('street', '')}, {a.get('city', '')}, "
            f"{a.get('state', '')} {a.get('zip_code', '')}, {a.get('country', 'India')}"
        )
