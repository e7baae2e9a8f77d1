from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator
from typing import List, Optional, Any, Dict
from datetime import date, datetime

from app.models.user import UserRole
from app.schemas.synthesis import ITPScores

# --- PEOPLE ---

class UserCreate(BaseModel):
    email: EmailStr
    name: str = Field(min_length=1)
    role: UserRole = UserRole.MANAGER

class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str
    role: UserRole

class EmployeeCreate(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    position: Optional[str] = None
    department: Optional[str] = None
    manager_id: Optional[int] = None

class EmployeeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    position: Optional[str]
    department: Optional[str]
    manager_id: Optional[int]

# --- CYCLES ---

class ReviewCycleCreate(BaseModel):
    name: str = Field(min_length=1)
    year: int = Field(ge=2000, le=2100)
    start_date: date
    end_date: date
    status: str = "draft"
    created_by: Optional[int] = None

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        if self.status not in ("draft", "active", "completed"):
            raise ValueError("status must be one of draft, active, completed")
        return self

class ReviewCycleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    year: int
    start_date: date
    end_date: date
    status: str

# --- REVIEWS ---

class ReviewCreate(BaseModel):
    employee_id: int
    review_cycle_id: int
    manager_id: int

class ReviewInputsUpdate(BaseModel):
    changed_by: int
    itp_self_scores: Optional[ITPScores] = None
    itp_manager_scores: Optional[ITPScores] = None
    feedback_360_text: Optional[str] = None
    feedback_360_filename: Optional[str] = None
    self_review_text: Optional[str] = None
    manager_comments: Optional[str] = None

class ReviewEdit(BaseModel):
    changed_by: int
    final_strengths: Optional[str] = None
    final_development: Optional[str] = None
    final_goals: Optional[str] = None
    final_overall: Optional[str] = None

class ReviewAction(BaseModel):
    changed_by: int

class ReviewHistoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    changed_by: int
    change_type: str
    changes: Optional[Dict[str, Any]]
    created_at: Optional[datetime]

class ReviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: int
    review_cycle_id: int
    manager_id: int
    status: str

    itp_self_humble: Optional[int]
    itp_self_hungry: Optional[int]
    itp_self_smart: Optional[int]
    itp_manager_humble: Optional[int]
    itp_manager_hungry: Optional[int]
    itp_manager_smart: Optional[int]

    feedback_360_filename: Optional[str]
    feedback_360_text: Optional[str]
    self_review_text: Optional[str]
    manager_comments: Optional[str]

    generated_strengths: Optional[str]
    generated_development: Optional[str]
    generated_goals: Optional[str]
    generated_overall: Optional[str]

    final_strengths: Optional[str]
    final_development: Optional[str]
    final_goals: Optional[str]
    final_overall: Optional[str]

    ai_model_used: Optional[str]
    generation_source: Optional[str]
    processing_time: Optional[int]

class ReviewDetailResponse(ReviewResponse):
    history: List[ReviewHistoryResponse] = []
