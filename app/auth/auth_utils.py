# app/auth/auth_utils.py
from jose import jwt, JWTError
from fastapi import Header

from app.quizzes import config
from app.quizzes.errors import UnauthorizedError


def decode_token(token: str) -> dict:
    if not config.JWT_SECRET_KEY:
        raise UnauthorizedError("Token verification is not configured")
    try:
        # Checks signature and expiration
        return jwt.decode(token, config.JWT_SECRET_KEY, algorithms=[config.JWT_ALGORITHM])
    except JWTError:
        raise UnauthorizedError("Invalid or Expired Token")


def verify_token(authorization: str = Header(None)) -> dict:
    if not authorization or not authorization.startswith("Bearer "):
        raise UnauthorizedError("Unauthorized")

    token = authorization.split(" ", 1)[1].strip()
    if not token:
        raise UnauthorizedError("Unauthorized")
    return decode_token(token)  # Contains sub and role
