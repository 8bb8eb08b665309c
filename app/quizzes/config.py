"""
Quiz Service Configuration
Database, auth and runtime settings
"""

import os

# MongoDB
MONGO_URL = os.getenv("MONGO_URL", "mongodb://localhost:27017")
MONGO_DB_NAME = os.getenv("MONGO_DB_NAME", "lms_db")

# JWT (shared secret with the auth service)
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

# Runtime
APP_ENV = os.getenv("APP_ENV", "production")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Roles
ROLE_ADMIN = "admin"
ROLE_USER = "user"


def is_development() -> bool:
    return APP_ENV.lower() == "development"
