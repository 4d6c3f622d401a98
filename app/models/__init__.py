from .company import Company
from .user import User

__all__ = [
    "User",
    "Company",
]
