from sqlalchemy import (
    Column, Integer, String, Text, DateTime, ForeignKey, CheckConstraint, UniqueConstraint
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base
import enum

ITP_TRAITS = ("humble", "hungry", "smart")


class ReviewStatus(str, enum.Enum):
    DRAFT = "draft"
    INPUTS_COMPLETE = "inputs_complete"
    GENERATED = "generated"
    REVIEWED = "reviewed"
    FINALIZED = "finalized"


def _itp_check(column: str) -> CheckConstraint:
    return CheckConstraint(f"{column} BETWEEN 1 AND 10", name=f"ck_reviews_{column}")


class Review(Base):
    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("employee_id", "review_cycle_id", name="uq_reviews_employee_cycle"),
        CheckConstraint(
            "status IN ('draft', 'inputs_complete', 'generated', 'reviewed', 'finalized')",
            name="ck_reviews_status",
        ),
        *[_itp_check(f"itp_{side}_{trait}") for side in ("self", "manager") for trait in ITP_TRAITS],
    )

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    review_cycle_id = Column(Integer, ForeignKey("review_cycles.id"), nullable=False, index=True)
    manager_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # ITP Assessment Scores (1-10)
    itp_self_humble = Column(Integer, nullable=True)
    itp_self_hungry = Column(Integer, nullable=True)
    itp_self_smart = Column(Integer, nullable=True)
    itp_manager_humble = Column(Integer, nullable=True)
    itp_manager_hungry = Column(Integer, nullable=True)
    itp_manager_smart = Column(Integer, nullable=True)

    # Input documents and text
    feedback_360_filename = Column(String(255), nullable=True)
    feedback_360_text = Column(Text, nullable=True)
    self_review_text = Column(Text, nullable=True)
    manager_comments = Column(Text, nullable=True)

    # AI generated sections
    generated_strengths = Column(Text, nullable=True)
    generated_development = Column(Text, nullable=True)
    generated_goals = Column(Text, nullable=True)
    generated_overall = Column(Text, nullable=True)

    # Final content after manager edits
    final_strengths = Column(Text, nullable=True)
    final_development = Column(Text, nullable=True)
    final_goals = Column(Text, nullable=True)
    final_overall = Column(Text, nullable=True)

    # Processing metadata
    ai_model_used = Column(String(100), nullable=True)
    generation_source = Column(String(20), nullable=True)  # ai, fallback
    processing_time = Column(Integer, nullable=True)  # seconds

    status = Column(String(50), default=ReviewStatus.DRAFT.value, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    employee = relationship("Employee", back_populates="reviews")
    review_cycle = relationship("ReviewCycle")
    history = relationship(
        "ReviewHistory", back_populates="review",
        order_by="ReviewHistory.id", cascade="all, delete-orphan"
    )

    def scores(self, side: str):
        """Return the {humble, hungry, smart} triple for 'self' or 'manager', or None if incomplete."""
        values = {trait: getattr(self, f"itp_{side}_{trait}") for trait in ITP_TRAITS}
        if any(v is None for v in values.values()):
            return None
        return values
