# app/models.py
"""SQLAlchemy ORM models for persisted entities.

Reviews and endorsements belong to their listing: they are removed with it
and each (listing, user) pair may appear at most once in either table.
"""
from sqlalchemy import (
    Boolean, CheckConstraint, Column, Float, ForeignKey, Index, Integer, Text, TIMESTAMP,
    UniqueConstraint, func,
)
from sqlalchemy.orm import relationship
from .db import Base

ROLES = ("user", "admin", "community")
LISTING_TYPES = ("service", "rental")
RENTAL_DURATION_UNITS = ("hour", "day", "week", "month")


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(Text, nullable=False)
    email = Column(Text, nullable=False, unique=True, index=True)
    password_hash = Column(Text, nullable=False)
    phone = Column(Text, nullable=False)
    role = Column(Text, nullable=False, default="user", server_default="user")
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint("role IN ('user', 'admin', 'community')", name="ck_users_role"),
    )


class Listing(Base):
    __tablename__ = "listings"
    id = Column(Integer, primary_key=True, index=True)
    title = Column(Text, nullable=False)
    description = Column(Text)
    category = Column(Text, nullable=False, index=True)
    type = Column(Text, nullable=False)
    posted_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    contact_number = Column(Text, nullable=False)

    is_community_posted = Column(Boolean, nullable=False, default=False)
    is_verified = Column(Boolean, nullable=False, default=False)

    # legacy freeform
    location = Column(Text)

    state = Column(Text)
    city = Column(Text)
    area = Column(Text)
    pincode = Column(Text)

    price = Column(Float)

    service_type = Column(Text)
    availability = Column(Text)

    rental_duration_unit = Column(Text)
    item_condition = Column(Text)

    photo_path = Column(Text)
    photo_public_id = Column(Text)

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

    poster = relationship("User")
    reviews = relationship(
        "Review", order_by="Review.id", cascade="all, delete-orphan", passive_deletes=True,
    )
    endorsements = relationship(
        "Endorsement", order_by="Endorsement.created_at", cascade="all, delete-orphan", passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint("type IN ('service', 'rental')", name="ck_listings_type"),
        CheckConstraint(
            "rental_duration_unit IS NULL OR rental_duration_unit IN ('hour', 'day', 'week', 'month')",
            name="ck_listings_rental_duration_unit",
        ),
    )

    @property
    def endorser_ids(self):
        return [e.user_id for e in self.endorsements]

    @property
    def endorsement_count(self):
        return len(self.endorsements)


class Review(Base):
    __tablename__ = "listing_reviews"
    id = Column(Integer, primary_key=True, index=True)
    listing_id = Column(Integer, ForeignKey("listings.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(Text)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("listing_id", "user_id", name="uq_review_listing_user"),
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_review_rating"),
    )


class Endorsement(Base):
    __tablename__ = "listing_endorsements"
    listing_id = Column(Integer, ForeignKey("listings.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), primary_key=True)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())


Index("idx_listings_created_at", Listing.created_at)
Index("idx_listings_city", Listing.city)
Index("idx_listings_pincode", Listing.pincode)
