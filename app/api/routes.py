# app/api/routes.py
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile

from .. import schemas, services, storage
from ..db import get_db
from ..errors import ValidationError
from .deps import get_current_user

router = APIRouter()

_FORM_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


async def _read_listing_payload(request: Request):
    """Return `(fields, photo)` from either a JSON body or a form with an optional `photo` file."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(_FORM_TYPES):
        form = await request.form()
        data, photo = {}, None
        for key, value in form.multi_items():
            if key == "photo":
                if isinstance(value, UploadFile) and value.filename:
                    photo = value
            else:
                data[key] = value
        return data, photo

    body = await request.body()
    if not body:
        return {}, None
    try:
        data = await request.json()
    except ValueError:
        raise ValidationError("Invalid JSON body")
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data, None


async def _store_photo(photo: Optional[UploadFile]):
    if photo is None:
        return None
    raw = await photo.read()
    return await run_in_threadpool(storage.save_image, raw, photo.filename, photo.content_type)


@router.get("/health")
def health():
    return {"status": "ok", "time": datetime.now(timezone.utc).isoformat()}


@router.get("/listings", response_model=schemas.ListingPage)
def listings(
    q: Optional[str] = None,
    category: Optional[str] = None,
    type: Optional[str] = None,
    city: Optional[str] = None,
    area: Optional[str] = None,
    pincode: Optional[str] = None,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    db: Session = Depends(get_db)
):
    filters = schemas.ListingFilter(q=q, category=category, type=type, city=city, area=area, pincode=pincode)
    return services.list_listings(db, filters=filters, page=page, limit=limit)


@router.post("/listings", response_model=schemas.ListingOut, status_code=201)
async def create_listing(
    request: Request,
    user: schemas.ActingUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    data, photo = await _read_listing_payload(request)
    photo_ref = await _store_photo(photo)
    return await run_in_threadpool(services.create_listing, db, data, user, photo_ref)


@router.get("/listings/{listing_id}", response_model=schemas.ListingOut)
def get_listing(listing_id: int, db: Session = Depends(get_db)):
    return services.get_listing(db, listing_id)


@router.api_route("/listings/{listing_id}", methods=["PUT", "PATCH"], response_model=schemas.ListingOut)
async def update_listing(
    listing_id: int,
    request: Request,
    user: schemas.ActingUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    await run_in_threadpool(services.authorize_update, db, listing_id, user)
    data, photo = await _read_listing_payload(request)
    photo_ref = await _store_photo(photo)
    return await run_in_threadpool(services.update_listing, db, listing_id, data, user, photo_ref)


@router.delete("/listings/{listing_id}")
def delete_listing(
    listing_id: int,
    user: schemas.ActingUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    services.delete_listing(db, listing_id, user)
    return {"message": "Deleted"}


@router.post("/listings/{listing_id}/reviews", response_model=List[schemas.ReviewOut], status_code=201)
def upsert_review(
    listing_id: int,
    payload: schemas.ReviewIn,
    user: schemas.ActingUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return services.upsert_review(db, listing_id, user, payload.rating, payload.comment)


@router.post("/listings/{listing_id}/endorse", response_model=schemas.EndorsementOut)
def toggle_endorsement(
    listing_id: int,
    user: schemas.ActingUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return services.toggle_endorsement(db, listing_id, user)
