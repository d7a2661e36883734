# app/schemas.py
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from typing import List, Literal, Optional, Union
from datetime import datetime

ListingType = Literal["service", "rental"]
RentalDurationUnit = Literal["hour", "day", "week", "month"]


class ActingUser(BaseModel):
    """Identity resolved from a verified bearer token."""
    id: int
    role: str = "user"

    @property
    def is_admin(self):
        return self.role == "admin"


class _ListingFields(BaseModel):
    # multipart forms send every value as text; blanks mean "not supplied"
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    title: Optional[str] = None
    category: Optional[str] = None
    contact_number: Optional[str] = None
    type: Optional[ListingType] = None
    description: Optional[str] = None
    location: Optional[str] = None
    state: Optional[str] = None
    city: Optional[str] = None
    area: Optional[str] = None
    pincode: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    service_type: Optional[str] = None
    availability: Optional[str] = None
    rental_duration_unit: Optional[RentalDurationUnit] = None
    item_condition: Optional[str] = None
    is_community_posted: Optional[Union[bool, str]] = None

    @model_validator(mode="before")
    @classmethod
    def _blank_to_none(cls, data):
        if isinstance(data, dict):
            return {k: (None if isinstance(v, str) and not v.strip() else v) for k, v in data.items()}
        return data

    @field_validator("pincode", "contact_number", mode="before")
    @classmethod
    def _number_as_text(cls, v):
        # JSON clients may send these as numbers; leading zeros only survive as strings
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


class ListingCreate(_ListingFields):
    # accepted for client compatibility, always replaced by the acting user
    posted_by: Optional[int] = None


class ListingUpdate(_ListingFields):
    pass


class PosterOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str


class ReviewOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    user_id: int
    rating: int
    comment: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ListingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    title: str
    description: Optional[str] = None
    category: str
    type: str
    posted_by: int
    poster: Optional[PosterOut] = None
    contact_number: str
    is_community_posted: bool
    is_verified: bool
    location: Optional[str] = None
    state: Optional[str] = None
    city: Optional[str] = None
    area: Optional[str] = None
    pincode: Optional[str] = None
    price: Optional[float] = None
    service_type: Optional[str] = None
    availability: Optional[str] = None
    rental_duration_unit: Optional[str] = None
    item_condition: Optional[str] = None
    photo_path: Optional[str] = None
    reviews: List[ReviewOut] = []
    endorser_ids: List[int] = []
    endorsement_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ListingPage(BaseModel):
    items: List[ListingOut]
    total: int
    page: int
    pages: int
    limit: int


class ListingFilter(BaseModel):
    q: Optional[str] = None
    category: Optional[str] = None
    type: Optional[str] = None
    city: Optional[str] = None
    area: Optional[str] = None
    pincode: Optional[str] = None


class ReviewIn(BaseModel):
    rating: int
    comment: Optional[str] = None


class EndorsementOut(BaseModel):
    action: Literal["added", "removed"]
    endorsement_count: int
    is_verified: bool


class VerifyIn(BaseModel):
    listing_id: int


class VerifyOut(BaseModel):
    message: str
    listing_id: int


class RegisterIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=6)
    phone: str = Field(..., min_length=1)


class LoginIn(BaseModel):
    email: str
    password: str


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str
    email: str
    phone: str
    role: str
    created_at: Optional[datetime] = None


class TokenOut(BaseModel):
    token: str
    user: UserOut


class DescriptionIn(BaseModel):
    title: str
    category: str
    keywords: Optional[str] = None


class ReviewSummaryIn(BaseModel):
    reviews: List[str] = []


class TextOut(BaseModel):
    text: str
