from fastapi import Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.auth.auth_utils import verify_token
from app.quizzes import config
from app.quizzes.database import get_active_enrollment
from app.quizzes.errors import UnauthorizedError, ForbiddenError


class UserContext:
    """
    Authenticated caller identity
    """
    def __init__(self, user_id: str, role: str, claims: dict = None):
        self.user_id = user_id
        self.role = role
        self.claims = claims or {}

    @property
    def is_admin(self) -> bool:
        return self.role == config.ROLE_ADMIN

    @property
    def is_student(self) -> bool:
        return self.role == config.ROLE_USER


async def get_current_user(claims: dict = Depends(verify_token)) -> UserContext:
    """
    Dependency: builds the caller context from verified token claims

    Raises:
        401: Token has no subject
        403: Unknown role
    """
    user_id = claims.get("sub")
    if not user_id:
        raise UnauthorizedError("Invalid token: missing user_id")

    role = claims.get("role", config.ROLE_USER)
    if role not in (config.ROLE_ADMIN, config.ROLE_USER):
        raise ForbiddenError(f"Unknown role: {role}")

    return UserContext(str(user_id), role, claims)


async def require_admin(user: UserContext = Depends(get_current_user)) -> UserContext:
    if not user.is_admin:
        raise ForbiddenError("Access denied. Admin privileges required.")
    return user


async def require_student(user: UserContext = Depends(get_current_user)) -> UserContext:
    if not user.is_student:
        raise ForbiddenError("Access denied. Student endpoint.")
    return user


async def verify_enrollment(db: AsyncIOMotorDatabase, course_id: str, user_id: str) -> dict:
    """
    Validates the student holds an active enrollment in the course

    Raises:
        403: Not enrolled
    """
    enrollment = await get_active_enrollment(db, course_id, user_id)
    if not enrollment:
        raise ForbiddenError("Not enrolled in this course. Please enroll first.")
    return enrollment
