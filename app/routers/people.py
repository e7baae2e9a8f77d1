from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional

from app.core.exceptions import ConflictError, NotFoundError
from app.database import get_db
from app.models.employee import Employee
from app.models.review_cycle import ReviewCycle
from app.models.user import User
from app.schemas.review import (
    EmployeeCreate, EmployeeResponse, ReviewCycleCreate, ReviewCycleResponse, UserCreate, UserResponse
)

router = APIRouter()


@router.post("/users", response_model=UserResponse, status_code=201, tags=["users"])
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    if db.query(User).filter(User.email == payload.email).first():
        raise ConflictError(f"User {payload.email} already exists")
    user = User(email=payload.email, name=payload.name, role=payload.role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@router.get("/users", response_model=List[UserResponse], tags=["users"])
def list_users(db: Session = Depends(get_db)):
    return db.query(User).order_by(User.id).all()


@router.post("/employees", response_model=EmployeeResponse, status_code=201, tags=["employees"])
def create_employee(payload: EmployeeCreate, db: Session = Depends(get_db)):
    if db.query(Employee).filter(Employee.email == payload.email).first():
        raise ConflictError(f"Employee {payload.email} already exists")
    if payload.manager_id is not None and db.get(User, payload.manager_id) is None:
        raise NotFoundError("User", payload.manager_id)
    employee = Employee(**payload.model_dump())
    db.add(employee)
    db.commit()
    db.refresh(employee)
    return employee


@router.get("/employees", response_model=List[EmployeeResponse], tags=["employees"])
def list_employees(manager_id: Optional[int] = None, db: Session = Depends(get_db)):
    query = db.query(Employee)
    if manager_id is not None:
        query = query.filter(Employee.manager_id == manager_id)
    return query.order_by(Employee.name).all()


@router.post("/cycles", response_model=ReviewCycleResponse, status_code=201, tags=["review cycles"])
def create_cycle(payload: ReviewCycleCreate, db: Session = Depends(get_db)):
    if payload.created_by is not None and db.get(User, payload.created_by) is None:
        raise NotFoundError("User", payload.created_by)
    cycle = ReviewCycle(**payload.model_dump())
    db.add(cycle)
    db.commit()
    db.refresh(cycle)
    return cycle


@router.get("/cycles", response_model=List[ReviewCycleResponse], tags=["review cycles"])
def list_cycles(year: Optional[int] = None, db: Session = Depends(get_db)):
    query = db.query(ReviewCycle)
    if year is not None:
        query = query.filter(ReviewCycle.year == year)
    return query.order_by(ReviewCycle.start_date.desc()).all()
