# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import user, employee, review_cycle, review, review_history

# Explicit class exports for cleaner imports
from .user import User, UserRole
from .employee import Employee
from .review_cycle import ReviewCycle, CycleStatus
from .review import Review, ReviewStatus, ITP_TRAITS
from .review_history import ReviewHistory

__all__ = [
    "User",
    "UserRole",
    "Employee",
    "ReviewCycle",
    "CycleStatus",
    "Review",
    "ReviewStatus",
    "ITP_TRAITS",
    "ReviewHistory",
]
