# app/services.py
"""Listing lifecycle rules plus the review and endorsement subsystem.

Every operation takes the acting user explicitly (None when anonymous). The
functions raise `app.errors` exceptions and leave transport concerns to the
routes.
"""
import math
import re
from typing import Any, Dict, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from . import config, crud, schemas
from .errors import ForbiddenError, NotFoundError, UnauthorizedError, ValidationError
from .utils import logger

REQUIRED_LISTING_FIELDS = ("title", "category", "contact_number", "type")
DEFAULT_PAGE_SIZE = 12
MAX_PAGE_SIZE = 50


def normalize_phone(phone, country_code: str = None) -> str:
    cc = country_code or config.DEFAULT_COUNTRY_CODE
    raw = str(phone or "").strip()
    digits = re.sub(r"\D", "", raw)
    if not digits:
        return ""
    if raw.startswith("+" + cc):
        return "+" + digits
    if digits.startswith(cc) and len(digits) >= 12:
        return "+" + digits
    if len(digits) == 10:
        return "+" + cc + digits
    return "+" + cc + digits[-10:]


def coerce_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return isinstance(value, str) and value.strip().lower() == "true"


def _require_user(acting_user: Optional[schemas.ActingUser]) -> schemas.ActingUser:
    if acting_user is None:
        raise UnauthorizedError("Missing token")
    return acting_user


def _parse(model, data):
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data or {})
    except PydanticValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'body'}: {err['msg']}" for err in e.errors()
        )
        raise ValidationError(f"Invalid fields: {details}")


def _missing_fields(values: Dict[str, Any], keys) -> list:
    return [k for k in keys if not values.get(k)]


def _normalize_listing_values(values: Dict[str, Any]) -> Dict[str, Any]:
    if "contact_number" in values and values["contact_number"] is not None:
        values["contact_number"] = normalize_phone(values["contact_number"])
    if "is_community_posted" in values:
        values["is_community_posted"] = coerce_bool(values["is_community_posted"])
    return values


def _get_or_404(db: Session, listing_id: int):
    listing = crud.get_listing(db, listing_id)
    if listing is None:
        raise NotFoundError("Listing not found")
    return listing


def _ensure_can_modify(listing, user: schemas.ActingUser):
    if listing.posted_by != user.id and not user.is_admin:
        logger.warning("User %s denied modifying listing %s", user.id, listing.id)
        raise ForbiddenError("Not allowed")


def create_listing(db: Session, data, acting_user: Optional[schemas.ActingUser], photo=None):
    """Create a listing owned by `acting_user`.

    `photo` is an optional `(path_or_url, public_id)` pair returned by the
    storage collaborator.
    """
    user = _require_user(acting_user)
    payload = _parse(schemas.ListingCreate, data)
    values = _normalize_listing_values(payload.model_dump())

    missing = _missing_fields(values, REQUIRED_LISTING_FIELDS)
    if missing:
        raise ValidationError(f"Missing fields: {', '.join(missing)}")

    values["posted_by"] = user.id
    values["is_community_posted"] = bool(values.get("is_community_posted"))
    values["is_verified"] = False
    if photo:
        values["photo_path"], values["photo_public_id"] = photo

    listing = crud.create_listing(db, values)
    logger.info("Listing %s created by user %s", listing.id, user.id)
    return crud.get_listing(db, listing.id)


def get_listing(db: Session, listing_id: int):
    return _get_or_404(db, listing_id)


def list_listings(db: Session, filters=None, page=None, limit=None):
    try:
        page = max(int(page or 1), 1)
    except (TypeError, ValueError):
        page = 1
    try:
        limit = int(limit or DEFAULT_PAGE_SIZE)
    except (TypeError, ValueError):
        limit = DEFAULT_PAGE_SIZE
    limit = min(max(limit, 1), MAX_PAGE_SIZE)

    if isinstance(filters, schemas.ListingFilter):
        filters = filters.model_dump()
    res = crud.list_listings(db, skip=(page - 1) * limit, limit=limit, filters=filters)
    return {
        "items": res["items"],
        "total": res["total"],
        "page": page,
        "pages": math.ceil(res["total"] / limit),
        "limit": limit,
    }


def authorize_update(db: Session, listing_id: int, acting_user: Optional[schemas.ActingUser]):
    """Return the listing when `acting_user` may modify it; raises 401/404/403 otherwise."""
    user = _require_user(acting_user)
    listing = _get_or_404(db, listing_id)
    _ensure_can_modify(listing, user)
    return listing


def update_listing(db: Session, listing_id: int, data, acting_user: Optional[schemas.ActingUser], photo=None):
    listing = authorize_update(db, listing_id, acting_user)
    user = acting_user

    payload = _parse(schemas.ListingUpdate, data)
    changes = _normalize_listing_values(payload.model_dump(exclude_unset=True))
    cleared = [k for k in REQUIRED_LISTING_FIELDS if k in changes and not changes[k]]
    if cleared:
        raise ValidationError(f"Missing fields: {', '.join(cleared)}")
    if photo:
        changes["photo_path"], changes["photo_public_id"] = photo

    listing = crud.update_listing(db, listing, changes)
    logger.info("Listing %s updated by user %s (%s)", listing.id, user.id, ", ".join(sorted(changes)) or "no changes")
    return crud.get_listing(db, listing.id)


def delete_listing(db: Session, listing_id: int, acting_user: Optional[schemas.ActingUser]):
    user = _require_user(acting_user)
    listing = _get_or_404(db, listing_id)
    _ensure_can_modify(listing, user)
    crud.delete_listing(db, listing)
    logger.info("Listing %s deleted by user %s", listing_id, user.id)


def upsert_review(db: Session, listing_id: int, acting_user: Optional[schemas.ActingUser], rating, comment=None):
    """Create or replace the acting user's review; returns the ordered review list."""
    user = _require_user(acting_user)
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        raise ValidationError("Rating must be an integer between 1 and 5")
    listing = _get_or_404(db, listing_id)
    reviews = crud.upsert_review(db, listing, user.id, rating, comment)
    logger.info("Review by user %s on listing %s saved (rating=%s)", user.id, listing_id, rating)
    return reviews


def toggle_endorsement(db: Session, listing_id: int, acting_user: Optional[schemas.ActingUser]):
    user = _require_user(acting_user)
    listing = _get_or_404(db, listing_id)
    was_verified = listing.is_verified
    action, count, is_verified = crud.toggle_endorsement(
        db, listing_id, user.id, config.ENDORSEMENT_THRESHOLD
    )
    logger.info("Endorsement %s on listing %s by user %s (count=%s)", action, listing_id, user.id, count)
    if is_verified and not was_verified:
        logger.info("Listing %s verified by community endorsements", listing_id)
    return {"action": action, "endorsement_count": count, "is_verified": is_verified}


def admin_verify(db: Session, listing_id: int, acting_user: Optional[schemas.ActingUser]):
    user = _require_user(acting_user)
    if user.role not in ("admin", "community"):
        logger.warning("User %s with role %s denied verifying listing %s", user.id, user.role, listing_id)
        raise ForbiddenError("Forbidden")
    _get_or_404(db, listing_id)
    crud.mark_verified(db, listing_id)
    logger.info("Listing %s verified by %s %s", listing_id, user.role, user.id)
    return listing_id
