from typing import Optional
import uuid
from sqlmodel import Field, SQLModel, UniqueConstraint
from datetime import datetime, timezone


class ItemInterest(SQLModel, table=True):
    __tablename__ = "item_interests"

    id: Optional[int] = Field(default=None, primary_key=True)
    contacted_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), index=True)

    item_id: uuid.UUID = Field(foreign_key="items.id", index=True, ondelete="CASCADE")
    user_id: int = Field(foreign_key="users.id", index=True)

    __table_args__ = (
        # a buyer is recorded at most once per item
        UniqueConstraint(
            "item_id",
            "user_id",
            name="uq_item_interest_user"
        ),
    )
