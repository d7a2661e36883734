# app/api/ai.py
from fastapi import APIRouter

from .. import schemas, textgen

router = APIRouter(prefix="/ai")


@router.post("/description", response_model=schemas.TextOut)
def describe(payload: schemas.DescriptionIn):
    return {"text": textgen.generate_description(payload.title, payload.category, payload.keywords)}


@router.post("/review-summary", response_model=schemas.TextOut)
def review_summary(payload: schemas.ReviewSummaryIn):
    return {"text": textgen.summarize_reviews(payload.reviews)}
