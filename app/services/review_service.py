"""
Review workflow: inputs, generation, manager edits and finalization.

Status moves draft -> inputs_complete -> generated -> reviewed -> finalized.
Every mutation appends a review_history row in the same transaction.
"""
import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import ConflictError, NotFoundError
from app.models.employee import Employee
from app.models.review import ITP_TRAITS, Review, ReviewStatus
from app.models.review_cycle import ReviewCycle
from app.models.review_history import ReviewHistory
from app.models.user import User
from app.schemas.review import ReviewCreate, ReviewEdit, ReviewInputsUpdate
from app.schemas.synthesis import ITPScores, ReviewInputs, SynthesisResult
from app.services.synthesis import compute_data_used, synthesize_review

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    ReviewStatus.DRAFT: {ReviewStatus.INPUTS_COMPLETE, ReviewStatus.GENERATED},
    ReviewStatus.INPUTS_COMPLETE: {ReviewStatus.INPUTS_COMPLETE, ReviewStatus.GENERATED},
    ReviewStatus.GENERATED: {ReviewStatus.GENERATED, ReviewStatus.REVIEWED, ReviewStatus.FINALIZED},
    ReviewStatus.REVIEWED: {ReviewStatus.REVIEWED, ReviewStatus.FINALIZED},
    ReviewStatus.FINALIZED: set(),
}

SECTION_COLUMNS = ("strengths", "development", "goals", "overall")


def _transition(review: Review, target: ReviewStatus) -> None:
    current = ReviewStatus(review.status)
    if target not in ALLOWED_TRANSITIONS[current]:
        raise ConflictError(f"Review {review.id} cannot move from {current.value} to {target.value}")
    review.status = target.value


def _require_user(db: Session, user_id: int) -> None:
    if db.get(User, user_id) is None:
        raise NotFoundError("User", user_id)


def _record(db: Session, review: Review, changed_by: int, change_type: str, changes: Dict[str, Any]) -> None:
    db.add(ReviewHistory(
        review_id=review.id, changed_by=changed_by, change_type=change_type, changes=changes
    ))


def get_review(db: Session, review_id: int) -> Review:
    review = db.get(Review, review_id)
    if review is None:
        raise NotFoundError("Review", review_id)
    return review


def create_review(db: Session, payload: ReviewCreate) -> Review:
    if db.get(Employee, payload.employee_id) is None:
        raise NotFoundError("Employee", payload.employee_id)
    if db.get(ReviewCycle, payload.review_cycle_id) is None:
        raise NotFoundError("Review cycle", payload.review_cycle_id)
    _require_user(db, payload.manager_id)

    existing = db.query(Review).filter(
        Review.employee_id == payload.employee_id,
        Review.review_cycle_id == payload.review_cycle_id,
    ).first()
    if existing is not None:
        raise ConflictError(
            f"A review already exists for employee {payload.employee_id} in cycle {payload.review_cycle_id}"
        )

    review = Review(
        employee_id=payload.employee_id,
        review_cycle_id=payload.review_cycle_id,
        manager_id=payload.manager_id,
        status=ReviewStatus.DRAFT.value,
    )
    db.add(review)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise ConflictError(
            f"A review already exists for employee {payload.employee_id} in cycle {payload.review_cycle_id}"
        )
    _record(db, review, payload.manager_id, "created", {})
    db.commit()
    db.refresh(review)
    return review


def review_inputs(review: Review) -> ReviewInputs:
    def scores(side: str) -> Optional[ITPScores]:
        values = review.scores(side)
        return ITPScores(**values) if values else None

    return ReviewInputs(
        itp_self_scores=scores("self"),
        itp_manager_scores=scores("manager"),
        feedback_360_text=review.feedback_360_text or "",
        self_review_text=review.self_review_text or "",
        manager_comments=review.manager_comments or "",
    )


def update_inputs(db: Session, review_id: int, payload: ReviewInputsUpdate) -> Review:
    review = get_review(db, review_id)
    _require_user(db, payload.changed_by)
    if ReviewStatus(review.status) not in (ReviewStatus.DRAFT, ReviewStatus.INPUTS_COMPLETE):
        raise ConflictError(f"Inputs of review {review.id} are locked once it is {review.status}")

    changes: Dict[str, Any] = {}
    for side, scores in (("self", payload.itp_self_scores), ("manager", payload.itp_manager_scores)):
        if scores is None:
            continue
        for trait in ITP_TRAITS:
            setattr(review, f"itp_{side}_{trait}", getattr(scores, trait))
        changes[f"itp_{side}_scores"] = scores.model_dump()

    for field in ("feedback_360_filename", "feedback_360_text", "self_review_text", "manager_comments"):
        value = getattr(payload, field)
        if value is not None:
            setattr(review, field, value)
            changes[field] = len(value)  # lengths only; review text stays out of the audit trail

    if compute_data_used(review_inputs(review)).any():
        _transition(review, ReviewStatus.INPUTS_COMPLETE)

    _record(db, review, payload.changed_by, "inputs_updated", changes)
    db.commit()
    db.refresh(review)
    return review


def generate(db: Session, review_id: int, changed_by: int) -> SynthesisResult:
    review = get_review(db, review_id)
    _require_user(db, changed_by)
    _transition(review, ReviewStatus.GENERATED)

    started = time.monotonic()
    result = synthesize_review(review_inputs(review))
    elapsed = int(round(time.monotonic() - started))

    review.generated_strengths = result.strengths
    review.generated_development = result.development_feedback
    review.generated_goals = result.goals_next_year
    review.generated_overall = result.overall_assessment
    review.ai_model_used = result.model
    review.generation_source = result.source
    review.processing_time = elapsed

    _record(db, review, changed_by, "generated", {
        "source": result.source,
        "model": result.model,
        "data_used": result.data_used.model_dump(by_alias=True),
    })
    db.commit()
    logger.info(f"Review {review.id} generated", extra={"source": result.source, "seconds": elapsed})
    return result


def edit(db: Session, review_id: int, payload: ReviewEdit) -> Review:
    review = get_review(db, review_id)
    _require_user(db, payload.changed_by)
    _transition(review, ReviewStatus.REVIEWED)

    edited = []
    for section in SECTION_COLUMNS:
        value = getattr(payload, f"final_{section}")
        if value is not None:
            setattr(review, f"final_{section}", value)
            edited.append(section)

    _record(db, review, payload.changed_by, "edited", {"sections": edited})
    db.commit()
    db.refresh(review)
    return review


def finalize(db: Session, review_id: int, changed_by: int) -> Review:
    review = get_review(db, review_id)
    _require_user(db, changed_by)
    _transition(review, ReviewStatus.FINALIZED)

    defaulted = []
    for section in SECTION_COLUMNS:
        if getattr(review, f"final_{section}") is None:
            setattr(review, f"final_{section}", getattr(review, f"generated_{section}"))
            defaulted.append(section)

    _record(db, review, changed_by, "finalized", {"defaulted_from_generated": defaulted})
    db.commit()
    db.refresh(review)
    return review


def export_text(review: Review) -> str:
    """Plain-text rendering of a review, as pasted into the HR system."""
    def section(name: str) -> str:
        return getattr(review, f"final_{name}") or getattr(review, f"generated_{name}") or ""

    data_used = compute_data_used(review_inputs(review))

    def mark(flag: bool) -> str:
        return "✓" if flag else "✗"

    employee_name = review.employee.name if review.employee else f"Employee {review.employee_id}"
    cycle_name = review.review_cycle.name if review.review_cycle else f"Cycle {review.review_cycle_id}"

    return f"""PERFORMANCE REVIEW: {employee_name}
{cycle_name}

GREATEST STRENGTHS:
{section("strengths")}

DEVELOPMENT FEEDBACK:
{section("development")}

GOALS FOR NEXT YEAR:
{section("goals")}

OVERALL ASSESSMENT:
{section("overall")}

---
Data Sources Used:
{mark(data_used.itp_scores)} ITP Assessment Scores
{mark(data_used.feedback_360)} 360 Feedback Document
{mark(data_used.self_review)} Employee Self Review
{mark(data_used.manager_comments)} Manager Comments

Generated on {datetime.now(timezone.utc):%Y-%m-%d}
Generated by {settings.app_name} v{settings.version}"""
