from .teams import router as teams
from .users import router as users

__all__ = ["teams", "users"]
