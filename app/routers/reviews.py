from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session
from typing import List, Optional

from app.database import get_db
from app.models.review import Review
from app.schemas.review import (
    ReviewAction, ReviewCreate, ReviewDetailResponse, ReviewEdit, ReviewInputsUpdate, ReviewResponse
)
from app.schemas.synthesis import SynthesisResult
from app.services import review_service

router = APIRouter(prefix="/reviews", tags=["reviews"])


@router.post("", response_model=ReviewResponse, status_code=201)
def create_review(payload: ReviewCreate, db: Session = Depends(get_db)):
    return review_service.create_review(db, payload)


@router.get("", response_model=List[ReviewResponse])
def list_reviews(
    cycle_id: Optional[int] = None,
    employee_id: Optional[int] = None,
    status: Optional[str] = None,
    db: Session = Depends(get_db),
):
    query = db.query(Review)
    if cycle_id is not None:
        query = query.filter(Review.review_cycle_id == cycle_id)
    if employee_id is not None:
        query = query.filter(Review.employee_id == employee_id)
    if status is not None:
        query = query.filter(Review.status == status)
    return query.order_by(Review.id).all()


@router.get("/{review_id}", response_model=ReviewDetailResponse)
def get_review(review_id: int, db: Session = Depends(get_db)):
    return review_service.get_review(db, review_id)


@router.put("/{review_id}/inputs", response_model=ReviewResponse)
def update_inputs(review_id: int, payload: ReviewInputsUpdate, db: Session = Depends(get_db)):
    return review_service.update_inputs(db, review_id, payload)


@router.post("/{review_id}/generate", response_model=SynthesisResult)
def generate_review(review_id: int, payload: ReviewAction, db: Session = Depends(get_db)):
    """Run the synthesis pipeline over the stored inputs and keep the result."""
    return review_service.generate(db, review_id, payload.changed_by)


@router.patch("/{review_id}", response_model=ReviewResponse)
def edit_review(review_id: int, payload: ReviewEdit, db: Session = Depends(get_db)):
    return review_service.edit(db, review_id, payload)


@router.post("/{review_id}/finalize", response_model=ReviewResponse)
def finalize_review(review_id: int, payload: ReviewAction, db: Session = Depends(get_db)):
    return review_service.finalize(db, review_id, payload.changed_by)


@router.get("/{review_id}/export", response_class=PlainTextResponse)
def export_review(review_id: int, db: Session = Depends(get_db)):
    return review_service.export_text(review_service.get_review(db, review_id))
