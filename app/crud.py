# app/crud.py
"""CRUD operations for listings, their reviews and endorsements, and users.

Also home of the listing search predicate builder used by the public
listing index.
"""
from sqlalchemy import and_, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload
from .models import Endorsement, Listing, Review, User
from typing import Any, Dict, List, Optional

_LISTING_LOADS = (
    selectinload(Listing.poster),
    selectinload(Listing.reviews),
    selectinload(Listing.endorsements),
)

# columns searched by the free-text `q` filter
_TEXT_SEARCH_COLUMNS = (
    Listing.title,
    Listing.description,
    Listing.location,
    Listing.category,
    Listing.city,
    Listing.area,
    Listing.pincode,
)


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _contains(column, value: str):
    return column.ilike(f"%{_escape_like(value)}%", escape="\\")


def _startswith(column, value: str):
    return column.ilike(f"{_escape_like(value)}%", escape="\\")


def build_listing_filters(filters: Optional[Dict[str, Any]]) -> List:
    """Translate optional filter fields into AND-ed SQL conditions.

    Empty or missing fields add no condition.
    """
    conds = []
    if not filters:
        return conds
    if filters.get("category"):
        conds.append(Listing.category == filters["category"])
    if filters.get("type"):
        conds.append(Listing.type == filters["type"])
    if filters.get("city"):
        conds.append(_contains(Listing.city, filters["city"]))
    if filters.get("area"):
        conds.append(_contains(Listing.area, filters["area"]))
    if filters.get("pincode"):
        conds.append(_startswith(Listing.pincode, filters["pincode"]))
    if filters.get("q"):
        conds.append(or_(*[_contains(col, filters["q"]) for col in _TEXT_SEARCH_COLUMNS]))
    return conds


def list_listings(db: Session, skip: int = 0, limit: int = 12, filters: Dict = None):
    q = db.query(Listing)
    conds = build_listing_filters(filters)
    if conds:
        q = q.filter(and_(*conds))
    total = q.count()
    items = (
        q.options(*_LISTING_LOADS)
        .order_by(Listing.created_at.desc(), Listing.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )
    return {"total": total, "items": items}


def get_listing(db: Session, listing_id: int):
    return db.query(Listing).options(*_LISTING_LOADS).filter(Listing.id == listing_id).first()


def create_listing(db: Session, data: Dict[str, Any]):
    obj = Listing(**data)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def update_listing(db: Session, obj: Listing, updates: Dict[str, Any]):
    for k, v in updates.items():
        setattr(obj, k, v)
    db.commit()
    db.refresh(obj)
    return obj


def delete_listing(db: Session, obj: Listing):
    db.delete(obj)
    db.commit()


def mark_verified(db: Session, listing_id: int) -> bool:
    """Set the verification flag if it is not already set. Returns True when it changed."""
    changed = (
        db.query(Listing)
        .filter(Listing.id == listing_id, Listing.is_verified.is_(False))
        .update({Listing.is_verified: True}, synchronize_session=False)
    )
    db.commit()
    return bool(changed)


def upsert_review(db: Session, listing: Listing, user_id: int, rating: int, comment: Optional[str]):
    existing = (
        db.query(Review)
        .filter(Review.listing_id == listing.id, Review.user_id == user_id)
        .first()
    )
    if existing is None:
        db.add(Review(listing_id=listing.id, user_id=user_id, rating=rating, comment=comment))
        try:
            db.commit()
        except IntegrityError:
            # the same user's first review landed concurrently; fall through to an update
            db.rollback()
            existing = (
                db.query(Review)
                .filter(Review.listing_id == listing.id, Review.user_id == user_id)
                .one()
            )
    if existing is not None:
        existing.rating = rating
        existing.comment = comment
        existing.updated_at = func.now()
        db.commit()
    db.refresh(listing)
    return listing.reviews


def lock_listing(db: Session, listing_id: int):
    """Row-locking query for one listing (`SELECT ... FOR UPDATE`; a no-op on SQLite)."""
    return db.query(Listing.id).filter(Listing.id == listing_id).with_for_update()


def toggle_endorsement(db: Session, listing_id: int, user_id: int, threshold: int):
    """Add or remove one user's endorsement and promote the listing at `threshold`.

    Returns (action, endorsement_count, is_verified). Verification is only ever
    switched on here.
    """
    # serializes toggles on one listing so the count below sees every committed change
    lock_listing(db, listing_id).one()
    removed = (
        db.query(Endorsement)
        .filter(Endorsement.listing_id == listing_id, Endorsement.user_id == user_id)
        .delete(synchronize_session="evaluate")
    )
    if removed:
        action = "removed"
    else:
        action = "added"
        db.add(Endorsement(listing_id=listing_id, user_id=user_id))
        try:
            db.flush()
        except IntegrityError:
            # a concurrent request from the same user already added it
            db.rollback()
            lock_listing(db, listing_id).one()

    count = (
        db.query(func.count(Endorsement.user_id))
        .filter(Endorsement.listing_id == listing_id)
        .scalar()
    )
    if count >= threshold:
        db.query(Listing).filter(
            Listing.id == listing_id, Listing.is_verified.is_(False)
        ).update({Listing.is_verified: True}, synchronize_session=False)
    db.commit()
    is_verified = db.query(Listing.is_verified).filter(Listing.id == listing_id).scalar()
    return action, count, bool(is_verified)


def get_user(db: Session, user_id: int):
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str):
    return db.query(User).filter(func.lower(User.email) == email.strip().lower()).first()


def create_user(db: Session, data: Dict[str, Any]):
    obj = User(**data)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj
