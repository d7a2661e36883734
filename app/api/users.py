# app/api/users.py
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import schemas, services
from ..db import get_db
from .deps import get_optional_user

router = APIRouter(prefix="/users")


# the path id is kept for client compatibility; the acting user comes from the token
@router.put("/{user_id}/community-verify", response_model=schemas.VerifyOut)
def community_verify(
    user_id: int,
    payload: schemas.VerifyIn,
    user: Optional[schemas.ActingUser] = Depends(get_optional_user),
    db: Session = Depends(get_db)
):
    listing_id = services.admin_verify(db, payload.listing_id, user)
    return {"message": "Listing marked Community Verified", "listing_id": listing_id}
