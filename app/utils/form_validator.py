from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator


Category = Literal[
    "Electronics",
    "Books",
    "Furniture",
    "Clothing",
    "Kitchen",
    "Sports",
    "Study Materials",
    "Appliances",
    "Accessories",
    "Other",
]
Condition = Literal["New", "Like New", "Good", "Fair", "Poor"]
RentDuration = Literal["hour", "day", "week", "month"]

PHONE_PATTERN = r"^\+?[\d\s\-()]+$"


class StrippedModel(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)


# Auth / profile

class RegisterRequest(StrippedModel):
    name: str = Field(min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(min_length=6)
    phone_number: str = Field(pattern=PHONE_PATTERN)
    hostel: int
    room_number: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return value.lower()


class LoginRequest(StrippedModel):
    email: EmailStr
    password: str

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return value.lower()


class ProfileUpdateRequest(StrippedModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=50)
    phone_number: Optional[str] = Field(default=None, pattern=PHONE_PATTERN)
    room_number: Optional[str] = Field(default=None, min_length=1)
    avatar: Optional[str] = None


class PasswordChangeRequest(BaseModel):
    current_password: str
    new_password: str = Field(min_length=6)


# Seller workflow

class SellerApplyRequest(StrippedModel):
    availability_hours: str = Field(min_length=1)
    profile_description: Optional[str] = Field(default="", max_length=500)


class SellerRejectRequest(StrippedModel):
    reason: str = Field(min_length=1, max_length=500)


# Items

class ItemCreateRequest(StrippedModel):
    title: str = Field(min_length=3, max_length=100)
    description: str = Field(min_length=10, max_length=1000)
    category: Category
    condition: Condition
    listing_type: Literal["sell", "rent"]
    price: float = Field(ge=0)
    rent_duration: Optional[RentDuration] = None
    images: List[str] = Field(min_length=1)
    tags: List[str] = Field(default_factory=list)
    specifications: Dict[str, str] = Field(default_factory=dict)

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, tags: List[str]) -> List[str]:
        return [tag.strip().lower() for tag in tags if tag.strip()]

    @model_validator(mode="after")
    def check_rent_duration(self):
        # rent_duration is present iff the listing is a rental
        if self.listing_type == "rent" and not self.rent_duration:
            raise ValueError("rent_duration is required for rent listings")
        if self.listing_type == "sell":
            self.rent_duration = None
        return self


class ItemUpdateRequest(StrippedModel):
    title: Optional[str] = Field(default=None, min_length=3, max_length=100)
    description: Optional[str] = Field(default=None, min_length=10, max_length=1000)
    price: Optional[float] = Field(default=None, ge=0)
    condition: Optional[Condition] = None
    status: Optional[Literal["available", "sold", "rented", "reserved"]] = None
    images: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    specifications: Optional[Dict[str, str]] = None

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, tags: Optional[List[str]]) -> Optional[List[str]]:
        if tags is None:
            return None
        return [tag.strip().lower() for tag in tags if tag.strip()]


class RateRequest(StrippedModel):
    rating: int = Field(ge=1, le=5)
    review: Optional[str] = Field(default="", max_length=300)


class ReportRequest(StrippedModel):
    reason: str = Field(min_length=1)
    description: Optional[str] = Field(default="", max_length=500)
